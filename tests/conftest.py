from unittest.mock import AsyncMock, patch

import httpx
import pytest
from httpx import ASGITransport


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("ELASTICSEARCH_URL", "http://es.test:9200")
    monkeypatch.setenv("INDEX_NAME", "booking")
    monkeypatch.setenv("LISTING_URL", "https://www.booking.com/searchresults.html")
    monkeypatch.setenv("CRAWL_CONCURRENCY", "2")


@pytest.fixture
async def client(mock_env):
    from app.main import app, lifespan

    # Index bootstrap is covered in the search index tests
    with patch(
        "app.main.SearchIndexService.ensure_indices", new_callable=AsyncMock
    ):
        async with lifespan(app):
            async with httpx.AsyncClient(
                transport=ASGITransport(app=app),
                base_url="http://test",
            ) as c:
                yield c
