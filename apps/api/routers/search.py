"""Cross-section search router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from routers.dependencies import get_content_repository
from services.content import ContentRepository
from services.search import DEFAULT_SEARCH_LIMIT, search_content

router = APIRouter()


@router.get("/search")
async def search(
    q: str = Query(default=""),
    limit: int = Query(default=DEFAULT_SEARCH_LIMIT, ge=1, le=500),
    sections: Optional[str] = Query(default=None, description="Comma-separated section keys"),
    date_from: Optional[str] = Query(default=None, alias="dateFrom"),
    date_to: Optional[str] = Query(default=None, alias="dateTo"),
    sort: str = Query(default="date", description="date, source or title"),
    order: str = Query(default="desc", description="asc or desc"),
    repository: ContentRepository = Depends(get_content_repository),
):
    section_list = [key.strip() for key in sections.split(",") if key.strip()] if sections else None
    return await search_content(
        repository,
        q,
        limit=limit,
        sections=section_list,
        date_from=date_from,
        date_to=date_to,
        sort=sort,
        order=order,
    )
