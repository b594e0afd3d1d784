"""
Authentication router: Google sign-in exchange and session status.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from config import is_admin_email
from routers.auth_scope import AuthContext, get_auth_context, get_optional_auth_context
from services.identity import verify_google_id_token
from services.session_token import create_session_token

router = APIRouter()
api_router = APIRouter()


class GoogleSignInRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id_token: str = Field(alias="idToken", min_length=1)


class SessionUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: str
    is_admin: bool = Field(default=False, serialization_alias="isAdmin")


class GoogleSignInResponse(BaseModel):
    token: str
    expires_at: int = Field(serialization_alias="expiresAt")
    user: SessionUser


def _session_status(auth: Optional[AuthContext]) -> dict:
    if auth is None:
        return {"authenticated": False}
    user = SessionUser(name=auth.name, email=auth.email, is_admin=auth.is_admin)
    return {"authenticated": True, "user": user.model_dump(by_alias=True)}


@router.post("/google")
async def google_sign_in(request: GoogleSignInRequest):
    """Exchange a Google ID token for a session token."""
    try:
        identity = await verify_google_id_token(request.id_token)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    session = create_session_token(identity["email"], name=identity.get("name"), subject=identity.get("sub"))
    response = GoogleSignInResponse(
        token=session["token"],
        expires_at=session["expires_at"],
        user=SessionUser(
            name=identity.get("name"),
            email=identity["email"],
            is_admin=is_admin_email(identity["email"]),
        ),
    )
    return response.model_dump(by_alias=True)


@router.get("/status")
async def auth_status(auth: Optional[AuthContext] = Depends(get_optional_auth_context)):
    return _session_status(auth)


@router.post("/logout")
async def logout(_auth: AuthContext = Depends(get_auth_context)):
    """Frontend-managed logout acknowledgment endpoint."""
    return {"message": "Logged out successfully"}


@api_router.get("/me")
async def current_user(auth: Optional[AuthContext] = Depends(get_optional_auth_context)):
    """Echo the current session for the static pages."""
    return _session_status(auth)
