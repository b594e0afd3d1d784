"""Content section router: homepage aggregate, listing and admin CRUD."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from routers.auth_scope import AuthContext, get_optional_auth_context, require_admin
from routers.dependencies import get_content_repository
from services.content import ContentRepository
from services.search import DEFAULT_HOMEPAGE_LIMIT, aggregate_homepage

router = APIRouter()
logger = logging.getLogger(__name__)


class ContentPayload(BaseModel):
    """Fields accepted when creating or editing an item in any section."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    url: Optional[str] = None
    source: Optional[str] = None
    status: Optional[str] = None
    date_added: Optional[str] = Field(default=None, alias="dateAdded")
    added_by: Optional[str] = Field(default=None, alias="addedBy")
    # Research sheet
    authors: Optional[str] = None
    institutions: Optional[str] = None
    # Profile-shaped research payloads
    name: Optional[str] = None
    institution: Optional[str] = None
    research_area: Optional[str] = Field(default=None, alias="researchArea")
    profile_url: Optional[str] = Field(default=None, alias="profileUrl")
    recent_publication: Optional[str] = Field(default=None, alias="recentPublication")
    publication_url: Optional[str] = Field(default=None, alias="publicationUrl")

    def to_fields(self):
        return self.model_dump(exclude_none=True, by_alias=True)


@router.get("/content")
async def get_homepage_content(
    search: str = Query(default=""),
    limit: int = Query(default=DEFAULT_HOMEPAGE_LIMIT, ge=0, le=500),
    repository: ContentRepository = Depends(get_content_repository),
):
    """Newest items of every section for the homepage."""
    return await aggregate_homepage(repository, search=search, limit=limit)


@router.get("/content/{section}")
async def list_section(
    section: str,
    search: str = Query(default=""),
    limit: int = Query(default=50, ge=0, le=1000),
    offset: int = Query(default=0, ge=0),
    include_total: bool = Query(default=False, alias="includeTotal"),
    include_deleted: bool = Query(default=False, alias="includeDeleted"),
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
    repository: ContentRepository = Depends(get_content_repository),
):
    if include_deleted and (auth is None or not auth.is_admin):
        raise HTTPException(status_code=403, detail="Admin access required")
    page = await repository.list_items(
        section,
        limit=limit,
        offset=offset,
        search=search,
        include_deleted=include_deleted,
    )
    return page.payload(include_total=include_total)


@router.post("/content/{section}", status_code=201)
async def create_item(
    section: str,
    payload: ContentPayload,
    auth: AuthContext = Depends(require_admin),
    repository: ContentRepository = Depends(get_content_repository),
):
    record = await repository.add_item(section, payload.to_fields(), added_by=auth.email)
    return record.to_api()


@router.put("/content/{section}/{item_id}")
async def update_item(
    section: str,
    item_id: str,
    payload: ContentPayload,
    _auth: AuthContext = Depends(require_admin),
    repository: ContentRepository = Depends(get_content_repository),
):
    record = await repository.update_item(section, item_id, payload.to_fields())
    return record.to_api()


@router.delete("/content/{section}/{item_id}")
async def delete_item(
    section: str,
    item_id: str,
    _auth: AuthContext = Depends(require_admin),
    repository: ContentRepository = Depends(get_content_repository),
):
    await repository.delete_item(section, item_id)
    return {"success": True}
