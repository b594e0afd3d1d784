"""
Health check endpoints.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from config import settings

router = APIRouter()


def _missing_store_settings() -> list:
    missing = []
    if not settings.CONTENT_SPREADSHEET_ID:
        missing.append("CONTENT_SPREADSHEET_ID")
    if not settings.RESEARCHERS_SPREADSHEET_ID:
        missing.append("RESEARCHERS_SPREADSHEET_ID")
    if not (settings.GOOGLE_CREDENTIALS or settings.GOOGLE_CREDENTIALS_FILE):
        missing.append("GOOGLE_CREDENTIALS")
    return missing


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Reports whether the spreadsheet store is configured; reads degrade to
    empty results when it is not.
    """
    missing = _missing_store_settings()
    return {
        "status": "healthy" if not missing else "degraded",
        "api": "up",
        "store": "configured" if not missing else "missing",
        "google_sign_in": "configured" if settings.GOOGLE_CLIENT_ID else "missing",
    }


@router.get("/health/ready")
async def readiness_check():
    """Kubernetes-style readiness probe."""
    missing = _missing_store_settings()
    if missing:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "missing": missing},
        )
    return {"ready": True}


@router.get("/health/live")
async def liveness_check():
    """Kubernetes-style liveness probe."""
    return {"alive": True}
