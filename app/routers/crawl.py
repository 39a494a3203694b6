import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.dependencies import JobStoreDep, PipelineDep
from app.jobs import JobStore
from app.schemas.crawl import CrawlResponse
from app.schemas.responses import JobStatusResponse, JobSubmittedResponse
from app.services.pipeline import CrawlPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


class CrawlRequest(BaseModel):
    listing_url: str | None = None
    concurrency: int | None = Field(default=None, ge=1)


async def _run_crawl(
    job_id: str,
    pipeline: CrawlPipeline,
    store: JobStore,
    request: CrawlRequest,
) -> None:
    store.mark_running(job_id)
    try:
        result = await pipeline.run(
            listing_url=request.listing_url, concurrency=request.concurrency
        )
        store.mark_completed(job_id, result)
    except Exception as exc:
        logger.exception("Crawl job %s failed", job_id)
        store.mark_failed(job_id, str(exc))


@router.post("/crawl", response_model=JobSubmittedResponse, status_code=202)
async def start_crawl(
    pipeline: PipelineDep,
    store: JobStoreDep,
    request: CrawlRequest | None = None,
) -> JobSubmittedResponse:
    request = request or CrawlRequest()

    existing = store.active_job(request.listing_url)
    if existing:
        return JSONResponse(content={
            "job_id": existing.job_id,
            "status": "already_running",
            "message": "A crawl of this listing is already running",
        })

    job = store.create_job(listing_url=request.listing_url, concurrency=request.concurrency)
    store.launch(job.job_id, _run_crawl(job.job_id, pipeline, store, request))
    return JobSubmittedResponse(
        job_id=job.job_id,
        status=job.status,
        message="Crawl job submitted",
    )


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job_status(job_id: str, store: JobStoreDep) -> JobStatusResponse:
    job = store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobStatusResponse(**job.model_dump())


@router.post("/crawl/sync", response_model=CrawlResponse)
async def crawl_sync(
    pipeline: PipelineDep,
    request: CrawlRequest | None = None,
) -> CrawlResponse:
    request = request or CrawlRequest()
    return await pipeline.run(
        listing_url=request.listing_url, concurrency=request.concurrency
    )
