"""Service wiring shared by the API routers."""

from fastapi import Depends

from routers.rate_limit import get_submission_rate_limiter
from services.content import ContentRepository
from services.rate_limiter import RateLimiter
from services.sheets_store import SheetsStore, get_store
from services.submissions import SubmissionWorkflow


def get_content_repository(store: SheetsStore = Depends(get_store)) -> ContentRepository:
    return ContentRepository(store)


def get_submission_workflow(
    store: SheetsStore = Depends(get_store),
    repository: ContentRepository = Depends(get_content_repository),
    rate_limiter: RateLimiter = Depends(get_submission_rate_limiter),
) -> SubmissionWorkflow:
    return SubmissionWorkflow(store, repository, rate_limiter)
