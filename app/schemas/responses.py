from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from app.schemas.crawl import CrawlResponse


class JobSubmittedResponse(BaseModel):
    job_id: str
    status: str
    message: str


class JobStatusResponse(BaseModel):
    job_id: str
    status: str
    created_at: datetime
    finished_at: datetime | None = None
    listing_url: str | None = None
    concurrency: int | None = None
    result: CrawlResponse | None = None
    error: str | None = None


class HotelLookupResponse(BaseModel):
    not_found: bool = False
    result: dict | None = None
