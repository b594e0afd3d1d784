"""Domain errors raised by store, repository and moderation services."""

from __future__ import annotations

from typing import Optional


class PolicyWireError(Exception):
    """Base error carrying the HTTP status and public message it maps to."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def to_payload(self) -> dict:
        if self.status_code >= 500:
            return {"error": self.public_message}
        return {"error": self.public_message, "message": self.message}


class InvalidSection(PolicyWireError):
    status_code = 400
    public_message = "Invalid section"

    def __init__(self, section: str):
        super().__init__(f"Unknown section: {section}")
        self.section = section


class ValidationError(PolicyWireError):
    status_code = 400
    public_message = "Validation failed"


class NotFound(PolicyWireError):
    status_code = 404
    public_message = "Not found"


class RateLimited(PolicyWireError):
    status_code = 429
    public_message = "Too many requests"


class StoreUnavailable(PolicyWireError):
    """The backing spreadsheet could not be reached or returned an error."""


class CredentialsMissing(StoreUnavailable):
    """Store credentials or spreadsheet identifiers are not configured."""
