import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.exceptions.custom import EmptyCatalogError, FetchError, IndexWriteError
from app.exceptions.handlers import (
    empty_catalog_error_handler,
    fetch_error_handler,
    index_write_error_handler,
)
from app.jobs import JobStore
from app.routers.crawl import router as crawl_router
from app.routers.hotels import router as hotels_router
from app.services.catalog import CatalogService
from app.services.crawler import CrawlScheduler
from app.services.hotel_page import HotelPageFetcher
from app.services.pipeline import CrawlPipeline
from app.services.search_index import SearchIndexService


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_pipeline(
    client: httpx.AsyncClient, settings: Settings
) -> tuple[CrawlPipeline, SearchIndexService]:
    search_index = SearchIndexService(client, settings.elasticsearch_url, settings.index_name)
    fetcher = HotelPageFetcher(
        client,
        booking_root=settings.booking_root,
        country_code=settings.country_code,
        primary_language=settings.primary_language,
        timeout=settings.fetch_timeout,
    )
    scheduler = CrawlScheduler(fetcher, settings.languages, queue_size=settings.queue_size)
    pipeline = CrawlPipeline(
        CatalogService(client, timeout=settings.fetch_timeout),
        scheduler,
        search_index,
        listing_url=settings.listing_url,
        concurrency=settings.crawl_concurrency,
    )
    return pipeline, search_index


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()
    configure_logging(settings)

    async with httpx.AsyncClient(timeout=settings.fetch_timeout) as client:
        pipeline, search_index = build_pipeline(client, settings)
        await search_index.ensure_indices(settings.languages, drop=settings.drop_on_startup)

        app.state.pipeline = pipeline
        app.state.search_index = search_index
        app.state.job_store = JobStore()

        yield


app = FastAPI(title="Hotel Indexer", lifespan=lifespan)

app.add_exception_handler(EmptyCatalogError, empty_catalog_error_handler)
app.add_exception_handler(FetchError, fetch_error_handler)
app.add_exception_handler(IndexWriteError, index_write_error_handler)

app.include_router(crawl_router)
app.include_router(hotels_router)
