"""Section-aware content repository built on the Sheets store."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from models.base import SheetRecord
from models.research_item import normalize_research_payload
from models.sections import Section, lookup_section
from services.errors import InvalidSection, NotFound, StoreUnavailable, ValidationError
from services.sheets_store import SheetsStore

logger = logging.getLogger(__name__)

ACTIVE_STATUS = "active"
DELETED_STATUS = "deleted"
DEFAULT_ADDED_BY = "admin"
PROTECTED_FIELDS = {"id"}


def resolve_section(key: str) -> Section:
    try:
        return lookup_section(key)
    except KeyError as exc:
        raise InvalidSection(key) from exc


def new_record_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _normalize_text(value: Any) -> str:
    return str(value or "").strip()


def coerce_fields(section: Section, data: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase or snake_case payload keys onto record field names, dropping unknown keys."""
    payload = normalize_research_payload(data) if section.is_research else dict(data)
    lookup: Dict[str, str] = {}
    for name, field in section.record_cls.model_fields.items():
        lookup[name] = name
        if field.alias:
            lookup[field.alias] = name
    fields: Dict[str, Any] = {}
    for key, value in payload.items():
        name = lookup.get(key)
        if name and value is not None:
            fields[name] = value
    return fields


def filter_records(records: List[SheetRecord], search: str = "", include_deleted: bool = False) -> List[SheetRecord]:
    needle = _normalize_text(search)
    visible = []
    for record in records:
        if not include_deleted and record.is_deleted:
            continue
        if not _normalize_text(getattr(record, "title", "")):
            continue
        if needle and not record.matches(needle):
            continue
        visible.append(record)
    return visible


def paginate(records: List[SheetRecord], limit: Optional[int], offset: int = 0) -> List[SheetRecord]:
    start = max(int(offset or 0), 0)
    if not limit or limit <= 0:
        return records[start:]
    return records[start:start + int(limit)]


@dataclass
class ItemPage:
    items: List[SheetRecord]
    total: int

    def payload(self, include_total: bool = False) -> Any:
        serialized = [item.to_api() for item in self.items]
        if include_total:
            return {"items": serialized, "total": self.total}
        return serialized


class ContentRepository:
    """CRUD, soft delete, search and pagination for one store."""

    def __init__(self, store: SheetsStore):
        self.store = store

    async def list_items(
        self,
        section_key: str,
        *,
        limit: Optional[int] = None,
        offset: int = 0,
        search: str = "",
        include_deleted: bool = False,
    ) -> ItemPage:
        """
        List a section newest first.

        Read failures degrade to an empty page so aggregate views never fail.
        ``limit`` of ``None`` or ``0`` returns everything after ``offset``.
        """
        section = resolve_section(section_key)
        try:
            stored = await self.store.read_records(section)
        except StoreUnavailable as exc:
            logger.warning("Listing %s failed, returning empty result: %s", section.key, exc)
            return ItemPage(items=[], total=0)

        records = filter_records([entry.record for entry in stored], search, include_deleted)
        # ISO-8601 strings sort chronologically.
        records.sort(key=lambda record: record.sort_date, reverse=True)
        return ItemPage(items=paginate(records, limit, offset), total=len(records))

    async def add_item(self, section_key: str, data: Dict[str, Any], added_by: Optional[str] = None) -> SheetRecord:
        section = resolve_section(section_key)
        fields = coerce_fields(section, data)
        title = _normalize_text(fields.get("title"))
        url = _normalize_text(fields.get("url"))
        if not title or not url:
            raise ValidationError("Title and URL are required")

        fields.update(
            id=new_record_id(),
            date_added=utc_now_iso(),
            title=title,
            url=url,
            status=ACTIVE_STATUS,
        )
        if "added_by" in section.record_cls.model_fields:
            fields["added_by"] = _normalize_text(added_by or fields.get("added_by")) or DEFAULT_ADDED_BY
        record = section.record_cls(**fields)
        await self.store.append_record(section, record)
        logger.info("Added %s item %s", section.key, record.id)
        return record

    async def update_item(self, section_key: str, item_id: str, data: Dict[str, Any]) -> SheetRecord:
        section = resolve_section(section_key)
        stored = await self.store.find_record(section, item_id)
        if stored is None:
            raise NotFound(f"{section.label} item {item_id} not found")

        changes = {
            name: _normalize_text(value)
            for name, value in coerce_fields(section, data).items()
            if name not in PROTECTED_FIELDS and _normalize_text(value)
        }
        record = stored.record.model_copy(update=changes)
        await self.store.write_record(section, stored.row_number, record)
        logger.info("Updated %s item %s", section.key, item_id)
        return record

    async def delete_item(self, section_key: str, item_id: str) -> None:
        """Soft delete: only the status cell changes. Deleting twice is a no-op."""
        section = resolve_section(section_key)
        stored = await self.store.find_record(section, item_id)
        if stored is None:
            raise NotFound(f"{section.label} item {item_id} not found")
        if stored.record.is_deleted:
            return
        await self.store.write_status(section, stored.row_number, DELETED_STATUS)
        logger.info("Deleted %s item %s", section.key, item_id)

    async def find_by_url(self, section_key: str, url: str) -> Optional[SheetRecord]:
        """Return the first live item in a section whose url matches exactly."""
        section = resolve_section(section_key)
        target = _normalize_text(url)
        for stored in await self.store.read_records(section):
            if not stored.record.is_deleted and _normalize_text(stored.record.url) == target:
                return stored.record
        return None
