import logging
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup, Tag

from app.exceptions.custom import EmptyCatalogError, FetchError
from app.schemas.hotel import HotelId

logger = logging.getLogger(__name__)

_HOTEL_LINK_SELECTOR = "a.hotel_name_link.url"
_NEARBY_SEPARATOR_SELECTOR = ".sr_separator"
_HOTEL_SUFFIX = ".html"
_MAX_BODY = 4 * 1024 * 1024  # 4 MB
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)


def hotel_id_from_href(href: str) -> HotelId:
    """Reduce a hotel link to its ID.

    Example: /hotel/ru/guest-house-snezhny-bars-abzakovo.html?dest_type=city#hotelTmpl
    gives guest-house-snezhny-bars-abzakovo
    """
    path = urlparse(href).path
    return path.rsplit("/", 1)[-1].removesuffix(_HOTEL_SUFFIX)


def extract_hotel_ids(html: str) -> list[HotelId]:
    """Return hotel IDs from a search results page, in document order.

    Results listed after the "nearby" separator belong to other
    destinations and are ignored. Duplicates are kept.
    """
    soup = BeautifulSoup(html, "html.parser")

    separator = soup.select_one(_NEARBY_SEPARATOR_SELECTOR)
    if separator is None:
        links = soup.select(_HOTEL_LINK_SELECTOR)
    else:
        links = []
        # find_previous_siblings walks backwards from the separator
        for sibling in reversed(separator.find_previous_siblings()):
            if not isinstance(sibling, Tag):
                continue
            links.extend(sibling.select(_HOTEL_LINK_SELECTOR))

    ids: list[HotelId] = []
    for link in links:
        href = link.get("href")
        if not href:
            continue
        hotel_id = hotel_id_from_href(href)
        if not hotel_id:
            logger.debug("Skipping hotel link without a name: %s", href)
            continue
        ids.append(hotel_id)

    if not ids:
        raise EmptyCatalogError()

    return ids


class CatalogService:
    def __init__(self, client: httpx.AsyncClient, timeout: float = 15.0):
        self._client = client
        self._timeout = timeout

    async def fetch_listing(self, url: str) -> str:
        """Download the search results page. Raises FetchError on failure."""
        try:
            resp = await self._client.get(
                url,
                follow_redirects=True,
                timeout=self._timeout,
                headers={"User-Agent": _USER_AGENT},
            )
        except httpx.HTTPError as exc:
            raise FetchError(f"Listing fetch failed: {exc!r}") from exc

        if resp.status_code >= 400:
            raise FetchError(
                f"Listing returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        if len(resp.content) > _MAX_BODY:
            raise FetchError(f"Listing page too large: {len(resp.content)} bytes")

        return resp.text

    async def list_hotel_ids(self, url: str) -> list[HotelId]:
        ids = extract_hotel_ids(await self.fetch_listing(url))
        logger.info("Found %d hotels on %s", len(ids), url)
        return ids
