"""Command-line entry point: bootstrap the indices and run one crawl."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from app.config import Settings
from app.exceptions.custom import EmptyCatalogError, FetchError, IndexWriteError
from app.main import build_pipeline, configure_logging
from app.schemas.crawl import CrawlResponse

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crawl a hotel listing page and index every hotel in every language.",
    )
    parser.add_argument(
        "--listing-url",
        default=None,
        help="Search results page to crawl (defaults to LISTING_URL)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Number of hotels crawled at the same time",
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Delete and recreate the indices before crawling",
    )
    return parser.parse_args(argv)


async def crawl(settings: Settings, args: argparse.Namespace) -> CrawlResponse:
    async with httpx.AsyncClient(timeout=settings.fetch_timeout) as client:
        pipeline, search_index = build_pipeline(client, settings)
        await search_index.ensure_indices(
            settings.languages, drop=args.drop or settings.drop_on_startup
        )
        return await pipeline.run(listing_url=args.listing_url, concurrency=args.concurrency)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.concurrency is not None and args.concurrency < 1:
        print("--concurrency must be a positive integer", file=sys.stderr)
        return 2

    settings = Settings()
    configure_logging(settings)

    try:
        result = asyncio.run(crawl(settings, args))
    except EmptyCatalogError as exc:
        logger.error("Nothing to crawl: %s", exc.message)
        return 1
    except FetchError as exc:
        logger.error("Could not load the listing page: %s", exc.message)
        return 1
    except IndexWriteError as exc:
        logger.error("Search index unavailable: %s (status=%s)", exc.message, exc.status_code)
        return 1

    print(result.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
