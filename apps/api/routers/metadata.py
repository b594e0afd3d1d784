"""Link metadata router used by the admin form to prefill title and source."""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from routers.rate_limit import rate_limit
from services.metadata import MetadataFetchError, fetch_link_metadata

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/metadata")
async def link_metadata(
    url: str = Query(default=""),
    _rate_limit: None = Depends(rate_limit("metadata", limit=30, window_seconds=60)),
):
    try:
        return await fetch_link_metadata(url)
    except MetadataFetchError as exc:
        logger.warning("Metadata fetch for %s failed: %s", url, exc)
        return JSONResponse(
            status_code=502,
            content={"error": "Failed to fetch metadata", "message": str(exc)},
        )
