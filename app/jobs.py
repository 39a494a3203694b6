from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Coroutine
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from app.schemas.crawl import CrawlResponse

logger = logging.getLogger(__name__)


class JobStatus(StrEnum):
    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"


_FINISHED = (JobStatus.completed, JobStatus.failed)


class CrawlJob(BaseModel):
    job_id: str
    status: JobStatus
    created_at: datetime
    finished_at: datetime | None = None
    listing_url: str | None = None  # None means the configured listing
    concurrency: int | None = None
    result: CrawlResponse | None = None
    error: str | None = None


class JobStore:
    """Background crawls, keyed by job ID.

    The store owns the asyncio task of every running crawl so the event
    loop cannot drop it while it is still indexing.
    """

    def __init__(self, max_jobs: int = 100) -> None:
        self._jobs: dict[str, CrawlJob] = {}
        self._tasks: set[asyncio.Task] = set()
        self._max_jobs = max_jobs

    @property
    def running_tasks(self) -> int:
        return len(self._tasks)

    def create_job(self, listing_url: str | None = None, concurrency: int | None = None) -> CrawlJob:
        job = CrawlJob(
            job_id=uuid.uuid4().hex[:12],
            status=JobStatus.pending,
            created_at=datetime.now(timezone.utc),
            listing_url=listing_url,
            concurrency=concurrency,
        )
        self._jobs[job.job_id] = job
        self._forget_old_crawls()
        return job

    def launch(self, job_id: str, crawl: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.create_task(crawl, name=f"crawl-{job_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _forget_old_crawls(self) -> None:
        finished = sorted(
            (j for j in self._jobs.values() if j.status in _FINISHED),
            key=lambda j: j.created_at,
        )
        for job in finished[: max(len(self._jobs) - self._max_jobs, 0)]:
            del self._jobs[job.job_id]

    def get_job(self, job_id: str) -> CrawlJob | None:
        return self._jobs.get(job_id)

    def active_job(self, listing_url: str | None = None) -> CrawlJob | None:
        """Pending or running crawl of the same listing, if any."""
        for job in self._jobs.values():
            if job.listing_url == listing_url and job.status not in _FINISHED:
                return job
        return None

    def mark_running(self, job_id: str) -> None:
        if job := self._jobs.get(job_id):
            job.status = JobStatus.running

    def mark_completed(self, job_id: str, result: CrawlResponse) -> None:
        if job := self._jobs.get(job_id):
            job.status = JobStatus.completed
            job.result = result
            job.finished_at = datetime.now(timezone.utc)
            logger.info(
                "Crawl job %s done: %d hotels, %d documents indexed",
                job_id, result.total_found, result.indexed,
            )

    def mark_failed(self, job_id: str, error: str) -> None:
        if job := self._jobs.get(job_id):
            job.status = JobStatus.failed
            job.error = error
            job.finished_at = datetime.now(timezone.utc)
