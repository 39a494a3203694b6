from typing import Annotated

from fastapi import Depends, Request

from app.jobs import JobStore
from app.services.pipeline import CrawlPipeline
from app.services.search_index import SearchIndexService


def get_pipeline(request: Request) -> CrawlPipeline:
    return request.app.state.pipeline


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_search_index(request: Request) -> SearchIndexService:
    return request.app.state.search_index


PipelineDep = Annotated[CrawlPipeline, Depends(get_pipeline)]
JobStoreDep = Annotated[JobStore, Depends(get_job_store)]
SearchIndexDep = Annotated[SearchIndexService, Depends(get_search_index)]
