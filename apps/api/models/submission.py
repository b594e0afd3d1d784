"""Submission model for the public intake queue (Submissions sheet)."""

from typing import Any

from pydantic import field_validator

from models.base import SheetRecord

PENDING = "pending"
APPROVED = "approved"
DISMISSED = "dismissed"


class Submission(SheetRecord):
    """Link submitted by a reader or the clipper extension, awaiting moderation."""

    COLUMNS = (
        "id",
        "date_submitted",
        "section",
        "title",
        "url",
        "source",
        "notes",
        "submitter_email",
        "status",
        "newsletter_signup",
    )
    SEARCH_FIELDS = ("title", "source", "notes")
    DATE_FIELD = "date_submitted"
    DEFAULT_STATUS = PENDING

    id: str = ""
    date_submitted: str = ""
    section: str = ""
    title: str = ""
    url: str = ""
    source: str = ""
    notes: str = ""
    submitter_email: str = ""
    status: str = PENDING
    newsletter_signup: bool = False

    @field_validator("newsletter_signup", mode="before")
    @classmethod
    def parse_signup_cell(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() in {"true", "yes", "1", "on"}
        return bool(value)

    @property
    def is_pending(self) -> bool:
        return self.status.strip().lower() == PENDING
