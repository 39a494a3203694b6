import asyncio
import logging
from collections.abc import AsyncIterator, Iterable, Sequence

from app.exceptions.custom import FetchError, InvalidGeoError
from app.mappers.record_assembler import assemble_records
from app.schemas.crawl import CrawlOutcome
from app.schemas.hotel import HotelId, LocaleDocument
from app.services.hotel_page import CoordinateOnce, HotelPageFetcher

logger = logging.getLogger(__name__)

_STOP = object()  # tells one worker to exit
_DONE = object()  # end of the outcome stream


class CrawlScheduler:
    """Crawls hotels with a fixed pool of workers.

    Each worker takes one hotel ID at a time off a bounded queue, fetches
    every configured language in order and puts a single CrawlOutcome on a
    bounded output queue. A slow consumer therefore blocks the workers.
    """

    def __init__(
        self,
        fetcher: HotelPageFetcher,
        languages: Sequence[str],
        queue_size: int = 16,
        drop_invalid_location: bool = True,
    ):
        self._fetcher = fetcher
        self._languages = list(languages)
        self._queue_size = queue_size
        self._drop_invalid_location = drop_invalid_location

    def run(self, ids: Iterable[HotelId], concurrency: int) -> AsyncIterator[CrawlOutcome]:
        """Stream one outcome per ID; order across IDs is not preserved.

        The stream ends once every ID has produced its outcome. Closing the
        stream early cancels the remaining work.
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be positive, got {concurrency}")
        return self._stream(list(ids), concurrency)

    async def _stream(self, ids: list[HotelId], concurrency: int) -> AsyncIterator[CrawlOutcome]:
        work: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        results: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)

        async def feed() -> None:
            for hotel_id in ids:
                await work.put(hotel_id)
            for _ in range(concurrency):
                await work.put(_STOP)

        async def worker(n: int) -> None:
            while True:
                hotel_id = await work.get()
                if hotel_id is _STOP:
                    logger.debug("Worker %d finished", n)
                    return
                await results.put(await self._crawl_safely(hotel_id))

        async def close_when_done(workers: list[asyncio.Task]) -> None:
            await asyncio.gather(*workers)
            await results.put(_DONE)

        feeder = asyncio.create_task(feed())
        workers = [asyncio.create_task(worker(n)) for n in range(concurrency)]
        closer = asyncio.create_task(close_when_done(workers))
        tasks = [feeder, *workers, closer]

        logger.info("Crawling %d hotels with %d workers", len(ids), concurrency)
        try:
            while True:
                outcome = await results.get()
                if outcome is _DONE:
                    break
                yield outcome
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _crawl_safely(self, hotel_id: HotelId) -> CrawlOutcome:
        try:
            return await self.crawl_hotel(hotel_id)
        except Exception as exc:
            logger.exception("Unexpected error crawling %s", hotel_id)
            return CrawlOutcome(
                hotel_id=hotel_id,
                failures={locale: f"Unexpected error: {exc!r}" for locale in self._languages},
            )

    async def crawl_hotel(self, hotel_id: HotelId) -> CrawlOutcome:
        """Fetch every language of one hotel and assemble its records.

        Languages are fetched one after another so the first successful page
        extracts the location and the rest reuse it.
        """
        coordinates = CoordinateOnce()
        documents: dict[str, LocaleDocument] = {}
        failures: dict[str, str] = {}

        for locale in self._languages:
            try:
                documents[locale] = await self._fetcher.fetch(hotel_id, locale, coordinates)
            except FetchError as exc:
                logger.warning("Failed to fetch %s (%s): %s", hotel_id, locale, exc.message)
                failures[locale] = exc.message

        try:
            records = assemble_records(
                hotel_id,
                documents,
                location=coordinates.location,
                drop_invalid_location=self._drop_invalid_location,
            )
        except InvalidGeoError as exc:
            logger.warning("Rejecting %s: %s", hotel_id, exc.message)
            failures.update({locale: exc.message for locale in documents})
            records = {}
        return CrawlOutcome(hotel_id=hotel_id, records=records, failures=failures)
