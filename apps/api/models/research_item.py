"""ResearchItem model for the Research sheet of the researchers spreadsheet."""

from typing import Any, Dict

from models.base import SheetRecord

# Profile-shaped payload keys accepted on write, mapped onto the canonical
# content-shaped columns.
PROFILE_FIELD_MAP = {
    "recentPublication": "title",
    "publicationUrl": "url",
    "name": "authors",
    "institution": "institutions",
    "researchArea": "source",
}


class ResearchItem(SheetRecord):
    """Research publication row (sheet columns A:H)."""

    COLUMNS = ("id", "date_added", "title", "url", "source", "authors", "institutions", "status")
    SEARCH_FIELDS = ("title", "source", "authors", "institutions")

    id: str = ""
    date_added: str = ""
    title: str = ""
    url: str = ""
    source: str = ""
    authors: str = ""
    institutions: str = ""
    status: str = "active"


def normalize_research_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map a profile-shaped research payload onto ResearchItem fields.

    Canonical keys win over their profile-shaped equivalents; ``profileUrl``
    is only used as the url when neither ``url`` nor ``publicationUrl`` is set.
    """
    normalized = {key: value for key, value in data.items() if key not in PROFILE_FIELD_MAP}
    for legacy_key, field in PROFILE_FIELD_MAP.items():
        value = data.get(legacy_key)
        if value and not normalized.get(field):
            normalized[field] = value
    profile_url = data.get("profileUrl")
    if profile_url and not normalized.get("url"):
        normalized["url"] = profile_url
    normalized.pop("profileUrl", None)
    return normalized
