"""RSS feed router."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from routers.dependencies import get_content_repository
from services.content import ContentRepository
from services.rss import build_feed

router = APIRouter()

RSS_MEDIA_TYPE = "application/rss+xml; charset=utf-8"


@router.get("/rss")
async def combined_feed(repository: ContentRepository = Depends(get_content_repository)):
    return Response(content=await build_feed(repository), media_type=RSS_MEDIA_TYPE)


@router.get("/rss/{section}")
async def section_feed(section: str, repository: ContentRepository = Depends(get_content_repository)):
    return Response(content=await build_feed(repository, section), media_type=RSS_MEDIA_TYPE)
