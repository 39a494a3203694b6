import logging

from app.exceptions.custom import IndexWriteError
from app.schemas.crawl import CrawlOutcome, CrawlResponse, HotelResult, OutcomeStatus
from app.services.catalog import CatalogService
from app.services.crawler import CrawlScheduler
from app.services.search_index import SearchIndexService

logger = logging.getLogger(__name__)


class CrawlPipeline:
    def __init__(
        self,
        catalog: CatalogService,
        scheduler: CrawlScheduler,
        search_index: SearchIndexService,
        listing_url: str,
        concurrency: int = 4,
    ):
        self._catalog = catalog
        self._scheduler = scheduler
        self._index = search_index
        self._listing_url = listing_url
        self._concurrency = concurrency

    async def run(
        self, listing_url: str | None = None, concurrency: int | None = None
    ) -> CrawlResponse:
        """Crawl one listing page and index every hotel found on it.

        Raises EmptyCatalogError when the listing has no hotels and
        FetchError when the listing itself cannot be downloaded.
        """
        ids = await self._catalog.list_hotel_ids(listing_url or self._listing_url)
        unique_ids = list(dict.fromkeys(ids))
        if len(unique_ids) < len(ids):
            logger.info("Skipping %d duplicate hotel IDs", len(ids) - len(unique_ids))

        results: list[HotelResult] = []
        counts = {status: 0 for status in OutcomeStatus}
        indexed = 0
        index_errors = 0

        if concurrency is None:
            concurrency = self._concurrency

        async for outcome in self._scheduler.run(unique_ids, concurrency):
            result = await self._index_outcome(outcome)
            results.append(result)
            counts[outcome.status] += 1
            indexed += len(result.indexed)
            index_errors += len(result.index_errors)

        response = CrawlResponse(
            total_found=len(unique_ids),
            complete=counts[OutcomeStatus.complete],
            partial=counts[OutcomeStatus.partial],
            failed=counts[OutcomeStatus.failed],
            indexed=indexed,
            index_errors=index_errors,
            results=results,
        )
        logger.info(
            "Crawl finished: %d hotels, %d complete, %d partial, %d failed, "
            "%d documents indexed, %d index errors",
            response.total_found,
            response.complete,
            response.partial,
            response.failed,
            response.indexed,
            response.index_errors,
        )
        return response

    async def _index_outcome(self, outcome: CrawlOutcome) -> HotelResult:
        result = HotelResult(
            hotel_id=outcome.hotel_id,
            status=outcome.status.value,
            fetch_errors=dict(outcome.failures),
        )
        for locale, record in outcome.records.items():
            try:
                await self._index.upsert(record)
                result.indexed.append(locale)
            except IndexWriteError as exc:
                logger.error(
                    "Failed to index %s (%s): %s (status=%s)",
                    record.hotel_id,
                    locale,
                    exc.message,
                    exc.status_code,
                )
                result.index_errors[locale] = exc.message
        return result
