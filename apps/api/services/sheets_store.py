"""
Google Sheets tabular store adapter.

Every sheet is a fixed-width table whose first row is a header. Records are
addressed by 1-based sheet row numbers: the data row at index ``i`` (header
excluded) lives on sheet row ``i + 2``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from config import settings
from models.base import SheetRecord
from models.sections import CONTENT_SPREADSHEET, RESEARCHERS_SPREADSHEET, Section
from services.errors import CredentialsMissing, StoreUnavailable

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
HEADER_ROWS = 1


def column_letter(index: int) -> str:
    """Convert a 1-based column index to its A1 letter (1 -> A, 27 -> AA)."""
    if index < 1:
        raise ValueError("column index must be >= 1")
    letters = ""
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def sheet_range(section: Section) -> str:
    last = column_letter(len(section.record_cls.COLUMNS))
    return f"{section.sheet}!A:{last}"


def row_range(section: Section, row_number: int) -> str:
    last = column_letter(len(section.record_cls.COLUMNS))
    return f"{section.sheet}!A{row_number}:{last}{row_number}"


def cell_range(section: Section, field: str, row_number: int) -> str:
    column = column_letter(section.record_cls.COLUMNS.index(field) + 1)
    return f"{section.sheet}!{column}{row_number}"


@dataclass
class StoredRecord:
    """A record together with the sheet row it was read from."""

    row_number: int
    record: SheetRecord


class SheetsStore:
    """Range-level reads and writes against the Google Sheets values API."""

    def __init__(
        self,
        spreadsheet_ids: Optional[Dict[str, str]] = None,
        credentials_info: Optional[str] = None,
        credentials_file: Optional[str] = None,
        service: Any = None,
    ):
        self.spreadsheet_ids = dict(spreadsheet_ids or {})
        self._credentials_info = (credentials_info or "").strip()
        self._credentials_file = (credentials_file or "").strip()
        self._service = service

    # ---- configuration ----

    def _load_credentials(self) -> Credentials:
        if self._credentials_info:
            try:
                info = json.loads(self._credentials_info)
            except ValueError as exc:
                raise CredentialsMissing("GOOGLE_CREDENTIALS is not valid JSON") from exc
            return Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
        if self._credentials_file and os.path.exists(self._credentials_file):
            return Credentials.from_service_account_file(self._credentials_file, scopes=SHEETS_SCOPES)
        raise CredentialsMissing("Google credentials not configured")

    def _values(self):
        if self._service is None:
            try:
                credentials = self._load_credentials()
            except GoogleAuthError as exc:
                raise CredentialsMissing(f"Invalid Google credentials: {exc}") from exc
            self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        return self._service.spreadsheets().values()

    def spreadsheet_id(self, spreadsheet: str) -> str:
        spreadsheet_id = (self.spreadsheet_ids.get(spreadsheet) or "").strip()
        if not spreadsheet_id:
            raise CredentialsMissing(f"Spreadsheet id for '{spreadsheet}' not configured")
        return spreadsheet_id

    async def _execute(self, description: str, build_request) -> Dict[str, Any]:
        def _do():
            return build_request(self._values()).execute()

        try:
            return await asyncio.to_thread(_do)
        except StoreUnavailable:
            raise
        except (HttpError, HttpLib2Error, GoogleAuthError, OSError) as exc:
            raise StoreUnavailable(f"Sheets {description} failed: {exc}") from exc

    # ---- range primitives ----

    async def read_range(self, spreadsheet: str, range_spec: str) -> List[List[str]]:
        spreadsheet_id = self.spreadsheet_id(spreadsheet)
        response = await self._execute(
            f"read {range_spec}",
            lambda values: values.get(spreadsheetId=spreadsheet_id, range=range_spec),
        )
        return [[str(cell) for cell in row] for row in response.get("values", [])]

    async def append_row(self, spreadsheet: str, range_spec: str, row: Sequence[str]) -> None:
        spreadsheet_id = self.spreadsheet_id(spreadsheet)
        await self._execute(
            f"append {range_spec}",
            lambda values: values.append(
                spreadsheetId=spreadsheet_id,
                range=range_spec,
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(row)]},
            ),
        )

    async def update_range(self, spreadsheet: str, range_spec: str, rows: Sequence[Sequence[str]]) -> None:
        spreadsheet_id = self.spreadsheet_id(spreadsheet)
        await self._execute(
            f"update {range_spec}",
            lambda values: values.update(
                spreadsheetId=spreadsheet_id,
                range=range_spec,
                valueInputOption="RAW",
                body={"values": [list(row) for row in rows]},
            ),
        )

    # ---- record helpers ----

    async def read_records(self, section: Section) -> List[StoredRecord]:
        """Read every data row of a section's sheet as typed records."""
        rows = await self.read_range(section.spreadsheet, sheet_range(section))
        records: List[StoredRecord] = []
        for index, row in enumerate(rows[HEADER_ROWS:]):
            if not any(cell.strip() for cell in row):
                continue
            records.append(StoredRecord(row_number=index + HEADER_ROWS + 1, record=section.record_cls.from_row(row)))
        return records

    async def find_record(self, section: Section, record_id: str) -> Optional[StoredRecord]:
        for stored in await self.read_records(section):
            if stored.record.id == record_id:
                return stored
        return None

    async def append_record(self, section: Section, record: SheetRecord) -> None:
        await self.append_row(section.spreadsheet, sheet_range(section), record.to_row())

    async def write_record(self, section: Section, row_number: int, record: SheetRecord) -> None:
        await self.update_range(section.spreadsheet, row_range(section, row_number), [record.to_row()])

    async def write_status(self, section: Section, row_number: int, status: str) -> None:
        await self.update_range(section.spreadsheet, cell_range(section, "status", row_number), [[status]])


@lru_cache(maxsize=1)
def _default_store() -> SheetsStore:
    return SheetsStore(
        spreadsheet_ids={
            CONTENT_SPREADSHEET: settings.CONTENT_SPREADSHEET_ID,
            RESEARCHERS_SPREADSHEET: settings.RESEARCHERS_SPREADSHEET_ID,
        },
        credentials_info=settings.GOOGLE_CREDENTIALS,
        credentials_file=settings.GOOGLE_CREDENTIALS_FILE,
    )


def get_store() -> SheetsStore:
    """FastAPI dependency returning the process-wide Sheets store."""
    return _default_store()
