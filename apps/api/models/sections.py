"""Registry of sheets backing each section and the submission queue."""

from dataclasses import dataclass
from typing import Dict, List, Type

from models.base import SheetRecord
from models.content_item import ContentItem
from models.research_item import ResearchItem
from models.submission import Submission

CONTENT_SPREADSHEET = "content"
RESEARCHERS_SPREADSHEET = "researchers"


@dataclass(frozen=True)
class Section:
    key: str
    sheet: str
    label: str
    spreadsheet: str
    record_cls: Type[SheetRecord]

    @property
    def is_research(self) -> bool:
        return self.record_cls is ResearchItem


SECTIONS: Dict[str, Section] = {
    "news": Section("news", "News", "News", CONTENT_SPREADSHEET, ContentItem),
    "ideas": Section("ideas", "Ideas", "Ideas", CONTENT_SPREADSHEET, ContentItem),
    "reports": Section("reports", "Reports", "Reports", CONTENT_SPREADSHEET, ContentItem),
    "research": Section("research", "Research", "Research", RESEARCHERS_SPREADSHEET, ResearchItem),
    "documents": Section("documents", "Documents", "Documents", CONTENT_SPREADSHEET, ContentItem),
    "podcasts": Section("podcasts", "Podcasts", "Podcasts", CONTENT_SPREADSHEET, ContentItem),
}

SUBMISSIONS = Section("submissions", "Submissions", "Submissions", CONTENT_SPREADSHEET, Submission)


def section_keys() -> List[str]:
    return list(SECTIONS.keys())


def lookup_section(key: str) -> Section:
    """Return the registered section for ``key`` (case-insensitive) or raise KeyError."""
    return SECTIONS[(key or "").strip().lower()]
