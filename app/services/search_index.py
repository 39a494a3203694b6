import logging
from collections.abc import Iterable

import httpx

from app.exceptions.custom import IndexWriteError
from app.schemas.hotel import HotelId, HotelRecord
from app.schemas.index import build_index_definition

logger = logging.getLogger(__name__)

_HEADERS = {"Content-Type": "application/json"}


class SearchIndexService:
    """Elasticsearch REST client for the per-language hotel indices.

    Each language is stored in its own index (``{index_name}-{language}``)
    and documents are keyed by hotel ID.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str, index_name: str = "booking"):
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._index_name = index_name

    def index_for(self, locale: str) -> str:
        return f"{self._index_name}-{locale}"

    def _url(self, *parts: str) -> str:
        return "/".join([self._base_url, *parts])

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, url, headers=_HEADERS, **kwargs)
        except httpx.HTTPError as exc:
            raise IndexWriteError(f"{method} {url} failed: {exc!r}") from exc

    async def upsert(self, record: HotelRecord) -> None:
        """Create or replace the document for (hotel, language)."""
        index = self.index_for(record.locale)
        url = self._url(index, "_doc", record.hotel_id)
        resp = await self._request("PUT", url, json=record.to_document())

        if resp.status_code >= 400:
            raise IndexWriteError(resp.text, status_code=resp.status_code)

        logger.info("Indexed hotel %s (%s)", record.hotel_id, record.locale)

    async def get_hotel(self, hotel_id: HotelId, locale: str) -> dict | None:
        """Return the stored document, or None if it does not exist."""
        url = self._url(self.index_for(locale), "_doc", hotel_id)
        resp = await self._request("GET", url)

        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            raise IndexWriteError(resp.text, status_code=resp.status_code)

        data = resp.json()
        if not data.get("found", True):
            return None
        return data.get("_source")

    async def index_exists(self, locale: str) -> bool:
        resp = await self._request("HEAD", self._url(self.index_for(locale)))
        if resp.status_code == 404:
            return False
        if resp.status_code >= 400:
            raise IndexWriteError(
                f"Index check for {self.index_for(locale)} failed",
                status_code=resp.status_code,
            )
        return True

    async def create_index(self, locale: str) -> None:
        index = self.index_for(locale)
        resp = await self._request(
            "PUT", self._url(index), json=build_index_definition(locale).body()
        )
        if resp.status_code >= 400:
            raise IndexWriteError(resp.text, status_code=resp.status_code)
        if not resp.json().get("acknowledged", False):
            raise IndexWriteError(f"Creation of index {index} was not acknowledged")

        logger.info("Created index %s", index)

    async def delete_index(self, locale: str) -> None:
        index = self.index_for(locale)
        resp = await self._request("DELETE", self._url(index))
        if resp.status_code >= 400 and resp.status_code != 404:
            raise IndexWriteError(resp.text, status_code=resp.status_code)

        logger.info("Deleted index %s", index)

    async def ensure_indices(self, languages: Iterable[str], drop: bool = False) -> None:
        """Make sure every language index exists, recreating them if ``drop``."""
        for locale in languages:
            exists = await self.index_exists(locale)
            if exists and drop:
                await self.delete_index(locale)
                exists = False
            if not exists:
                await self.create_index(locale)
