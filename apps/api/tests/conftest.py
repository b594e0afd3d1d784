import re
from typing import Dict, List, Sequence, Set, Tuple
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config import settings
from main import app
from models.base import SheetRecord
from models.sections import Section
from services.errors import StoreUnavailable
from services.rate_limiter import RateLimiter
from services.sheets_store import SheetsStore, get_store


ADMIN_EMAIL = "editor@policywire.test"

RANGE_PATTERN = re.compile(
    r"^(?P<sheet>[^!]+)!(?P<start_col>[A-Z]+)(?P<start_row>\d*)(?::(?P<end_col>[A-Z]+)(?P<end_row>\d*))?$"
)


def _column_index(letters: str) -> int:
    index = 0
    for letter in letters:
        index = index * 26 + (ord(letter) - ord("A") + 1)
    return index


class MemorySheetsStore(SheetsStore):
    """SheetsStore whose range primitives operate on in-memory rows."""

    def __init__(self):
        super().__init__(spreadsheet_ids={"content": "content-sheet", "researchers": "researchers-sheet"})
        self.sheets: Dict[Tuple[str, str], List[List[str]]] = {}
        self.calls: List[Tuple[str, str]] = []
        self.fail_writes = False
        self.fail_reads: Set[str] = set()
        self.crash_reads: Set[str] = set()
        self.fail_ranges: Set[str] = set()

    def _rows(self, spreadsheet: str, sheet: str) -> List[List[str]]:
        return self.sheets.setdefault((spreadsheet, sheet), [["header"]])

    def seed(self, section: Section, records: Sequence[SheetRecord]) -> None:
        rows = self._rows(section.spreadsheet, section.sheet)
        rows.extend(record.to_row() for record in records)

    def rows_for(self, section: Section) -> List[List[str]]:
        return self._rows(section.spreadsheet, section.sheet)[1:]

    async def read_range(self, spreadsheet: str, range_spec: str) -> List[List[str]]:
        self.spreadsheet_id(spreadsheet)
        self.calls.append(("read", range_spec))
        match = RANGE_PATTERN.match(range_spec)
        sheet = match.group("sheet")
        if sheet in self.crash_reads:
            raise RuntimeError(f"{sheet} exploded")
        if sheet in self.fail_reads:
            raise StoreUnavailable(f"{sheet} unavailable")
        last = _column_index(match.group("end_col") or match.group("start_col"))
        return [list(row[:last]) for row in self._rows(spreadsheet, sheet)]

    async def append_row(self, spreadsheet: str, range_spec: str, row: Sequence[str]) -> None:
        self.spreadsheet_id(spreadsheet)
        self.calls.append(("append", range_spec))
        if self.fail_writes:
            raise StoreUnavailable("append failed")
        sheet = RANGE_PATTERN.match(range_spec).group("sheet")
        self._rows(spreadsheet, sheet).append(list(row))

    async def update_range(self, spreadsheet: str, range_spec: str, rows: Sequence[Sequence[str]]) -> None:
        self.spreadsheet_id(spreadsheet)
        self.calls.append(("update", range_spec))
        if self.fail_writes or range_spec in self.fail_ranges:
            raise StoreUnavailable("update failed")
        match = RANGE_PATTERN.match(range_spec)
        sheet_rows = self._rows(spreadsheet, match.group("sheet"))
        start_row = int(match.group("start_row"))
        start_col = _column_index(match.group("start_col"))
        for offset, values in enumerate(rows):
            target = sheet_rows[start_row - 1 + offset]
            needed = start_col - 1 + len(values)
            target.extend([""] * (needed - len(target)))
            for position, value in enumerate(values):
                target[start_col - 1 + position] = value


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store() -> MemorySheetsStore:
    return MemorySheetsStore()


@pytest.fixture(autouse=True)
def reset_rate_limiters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = (app.state.submission_rate_limiter, app.state.rate_limiters)
    app.state.submission_rate_limiter = RateLimiter(5, 60)
    app.state.rate_limiters = {}
    yield
    app.state.submission_rate_limiter, app.state.rate_limiters = previous


@pytest.fixture(autouse=True)
def admin_allowlist():
    with patch.object(settings, "ADMIN_EMAILS", [ADMIN_EMAIL]):
        yield


@pytest_asyncio.fixture
async def api_client(store):
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_store, None)


def make_item(record_cls, record_id: str, title: str, date_added: str, **fields) -> SheetRecord:
    return record_cls(id=record_id, title=title, date_added=date_added, url=f"https://example.org/{record_id}", **fields)
