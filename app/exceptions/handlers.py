import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import EmptyCatalogError, FetchError, IndexWriteError

logger = logging.getLogger(__name__)


async def empty_catalog_error_handler(_request: Request, exc: EmptyCatalogError) -> JSONResponse:
    logger.warning("Empty catalog: %s", exc.message)
    return JSONResponse(
        status_code=422,
        content={"detail": f"Empty catalog: {exc.message}"},
    )


async def fetch_error_handler(_request: Request, exc: FetchError) -> JSONResponse:
    logger.error("Fetch error: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Fetch error: {exc.message}"},
    )


async def index_write_error_handler(_request: Request, exc: IndexWriteError) -> JSONResponse:
    logger.error("Search index error: %s (status=%s)", exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Search index error: {exc.message}"},
    )
