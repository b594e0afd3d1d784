"""Authentication dependencies for admin-gated routes."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import is_admin_email
from services.session_token import decode_session_token


auth_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthContext:
    email: str
    name: Optional[str] = None
    subject: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return is_admin_email(self.email)


def _context_from_credentials(credentials: Optional[HTTPAuthorizationCredentials]) -> AuthContext:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_session_token(credentials.credentials)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return AuthContext(
        email=str(payload.get("email", "")),
        name=payload.get("name"),
        subject=str(payload.get("sub", "")) or None,
    )


async def get_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
) -> AuthContext:
    """Resolve the signed-in account from the Bearer session token."""
    return _context_from_credentials(credentials)


async def get_optional_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
) -> Optional[AuthContext]:
    """Like get_auth_context, but anonymous or invalid sessions resolve to None."""
    if not credentials:
        return None
    try:
        return _context_from_credentials(credentials)
    except HTTPException:
        return None


async def require_admin(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not auth.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return auth
