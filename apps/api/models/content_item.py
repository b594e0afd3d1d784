"""ContentItem model for News/Ideas/Reports/Documents/Podcasts rows."""

from models.base import SheetRecord


class ContentItem(SheetRecord):
    """Curated link in one of the content sections (sheet columns A:G)."""

    COLUMNS = ("id", "date_added", "title", "url", "source", "added_by", "status")
    SEARCH_FIELDS = ("title", "source")

    id: str = ""
    date_added: str = ""
    title: str = ""
    url: str = ""
    source: str = ""
    added_by: str = "admin"
    status: str = "active"
