"""Models package."""

from .base import SheetRecord
from .content_item import ContentItem
from .research_item import ResearchItem
from .submission import Submission
from .sections import SECTIONS, SUBMISSIONS, Section
