"""Google ID token verification for admin sign-in."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from config import settings


def _verify(token: str) -> Dict[str, Any]:
    return id_token.verify_oauth2_token(token, google_requests.Request(), settings.GOOGLE_CLIENT_ID)


async def verify_google_id_token(token: str) -> Dict[str, Any]:
    """Verify a Google-issued ID token and return the signed-in identity."""
    if not settings.GOOGLE_CLIENT_ID:
        raise ValueError("Google sign-in is not configured.")
    try:
        claims = await asyncio.to_thread(_verify, token)
    except ValueError as exc:
        raise ValueError(f"Invalid Google ID token: {exc}") from exc

    email = str(claims.get("email", "")).strip().lower()
    if not email or not claims.get("email_verified", False):
        raise ValueError("Google account e-mail is not verified.")
    return {
        "sub": str(claims.get("sub", "")),
        "email": email,
        "name": claims.get("name"),
    }
