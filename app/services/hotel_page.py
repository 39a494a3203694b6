import asyncio
import logging
import re

import httpx
from bs4 import BeautifulSoup, Tag

from app.exceptions.custom import FetchError
from app.schemas.hotel import HotelId, LocaleDocument, Location, Room

logger = logging.getLogger(__name__)

_MAX_BODY = 4 * 1024 * 1024  # 4 MB
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)
_TRIM_CHARS = "\t\n "

# Coordinates are only present in inline <script> assignments
_LAT_RE = re.compile(r"booking\.env\.b_map_center_latitude = (-?\d+(?:\.\d+)?);")
_LON_RE = re.compile(r"booking\.env\.b_map_center_longitude = (-?\d+(?:\.\d+)?);")


def _trim(text: str) -> str:
    return text.strip(_TRIM_CHARS)


def _select_text(soup: BeautifulSoup, selector: str) -> str:
    node = soup.select_one(selector)
    return _trim(node.get_text()) if node else ""


def extract_location(html: str) -> Location | None:
    """Find the map center in raw page markup. Both halves must be present."""
    lat = _LAT_RE.search(html)
    lon = _LON_RE.search(html)
    if lat is None or lon is None:
        return None
    return Location(lat=float(lat.group(1)), lon=float(lon.group(1)))


def extract_amenities(soup: BeautifulSoup) -> list[str]:
    # The same facilities are rendered again elsewhere on the page
    region = soup.select_one(".facilities-sliding-keep")
    if region is None:
        return []
    return [_trim(node.get_text()) for node in region.select(".important_facility")]


def extract_rooms(soup: BeautifulSoup) -> list[Room]:
    table = soup.select_one(".roomstable")
    if table is None:
        return []
    body = table.find("tbody")
    if not isinstance(body, Tag):
        return []

    rooms: list[Room] = []
    for row in body.find_all(recursive=False):
        if "extendedRow" in (row.get("class") or []):
            continue
        link = row.select_one("a.togglelink")
        rooms.append(
            Room(
                name=_trim(link.get_text()) if link else "",
                max_people=len(row.select("i.bicon-occupancy")),
            )
        )
    return rooms


def parse_hotel_page(html: str, hotel_id: HotelId, locale: str) -> LocaleDocument:
    """Extract the language-dependent fields of a hotel page."""
    soup = BeautifulSoup(html, "html.parser")

    name = _select_text(soup, "h2.hp__hotel-name")
    if not name:
        raise FetchError(
            f"No hotel name found on page for {hotel_id} ({locale})",
            hotel_id=hotel_id,
            locale=locale,
        )

    return LocaleDocument(
        hotel_id=hotel_id,
        locale=locale,
        name=name,
        address=_select_text(soup, "span.hp_address_subtitle"),
        summary=_select_text(soup, "#summary"),
        amenities=extract_amenities(soup),
        rooms=extract_rooms(soup),
    )


class CoordinateOnce:
    """Coordinate extraction guard for a single hotel.

    The first successful page fetch of the hotel extracts the location;
    every later fetch of the same hotel reuses it. Each hotel gets its own
    guard so different hotels never wait on each other.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._done = False
        self._location: Location | None = None

    @property
    def done(self) -> bool:
        return self._done

    @property
    def location(self) -> Location | None:
        return self._location

    async def extract(self, html: str) -> tuple[Location | None, bool]:
        """Return (location, ran_extraction)."""
        async with self._lock:
            if self._done:
                return self._location, False
            self._location = extract_location(html)
            self._done = True
            return self._location, True


class HotelPageFetcher:
    def __init__(
        self,
        client: httpx.AsyncClient,
        booking_root: str = "https://www.booking.com",
        country_code: str = "ru",
        primary_language: str = "en",
        timeout: float = 15.0,
    ):
        self._client = client
        self._root = booking_root.rstrip("/")
        self._country = country_code
        self._primary = primary_language
        self._timeout = timeout

    def hotel_url(self, hotel_id: HotelId, locale: str) -> str:
        """The primary language page has no language suffix."""
        if not locale or locale == self._primary:
            return f"{self._root}/hotel/{self._country}/{hotel_id}.html"
        return f"{self._root}/hotel/{self._country}/{hotel_id}.{locale}.html"

    async def fetch(
        self,
        hotel_id: HotelId,
        locale: str,
        coordinates: CoordinateOnce,
    ) -> LocaleDocument:
        html = await self._fetch_html(hotel_id, locale)
        document = parse_hotel_page(html, hotel_id, locale)

        location, extracted = await coordinates.extract(html)
        if extracted:
            logger.debug("Extracted location for %s from %s page: %s", hotel_id, locale, location)
            document = document.model_copy(update={"location": location})

        return document

    async def _fetch_html(self, hotel_id: HotelId, locale: str) -> str:
        url = self.hotel_url(hotel_id, locale)
        try:
            async with asyncio.timeout(self._timeout):
                resp = await self._client.get(
                    url,
                    follow_redirects=True,
                    timeout=self._timeout,
                    headers={"User-Agent": _USER_AGENT, "Accept-Language": locale},
                )
        except TimeoutError as exc:
            raise FetchError(
                f"Timed out after {self._timeout}s fetching {url}",
                hotel_id=hotel_id,
                locale=locale,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                f"Request to {url} failed: {exc!r}",
                hotel_id=hotel_id,
                locale=locale,
            ) from exc

        if resp.status_code >= 400:
            raise FetchError(
                f"{url} returned HTTP {resp.status_code}",
                hotel_id=hotel_id,
                locale=locale,
                status_code=resp.status_code,
            )

        content_type = resp.headers.get("content-type", "")
        if "text/html" not in content_type:
            raise FetchError(
                f"{url} is not HTML ({content_type})",
                hotel_id=hotel_id,
                locale=locale,
            )

        if len(resp.content) > _MAX_BODY:
            raise FetchError(
                f"{url} too large: {len(resp.content)} bytes",
                hotel_id=hotel_id,
                locale=locale,
            )

        return resp.text
