from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from app.schemas.hotel import HotelId, HotelRecord


class OutcomeStatus(StrEnum):
    complete = "complete"
    partial = "partial"
    failed = "failed"


class CrawlOutcome(BaseModel):
    """Result of crawling every language of one hotel.

    Successful languages land in ``records``, failed ones in ``failures``
    (language -> error message). Exactly one outcome is produced per hotel.
    """

    hotel_id: HotelId
    records: dict[str, HotelRecord] = {}
    failures: dict[str, str] = {}

    @property
    def status(self) -> OutcomeStatus:
        if not self.failures:
            return OutcomeStatus.complete
        if self.records:
            return OutcomeStatus.partial
        return OutcomeStatus.failed


class HotelResult(BaseModel):
    hotel_id: HotelId
    status: str  # "complete" | "partial" | "failed"
    indexed: list[str] = []
    fetch_errors: dict[str, str] = {}
    index_errors: dict[str, str] = {}


class CrawlResponse(BaseModel):
    total_found: int
    complete: int
    partial: int
    failed: int
    indexed: int  # (hotel, language) documents written
    index_errors: int
    results: list[HotelResult]
