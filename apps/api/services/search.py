"""Cross-section search and homepage aggregation."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from models.base import SheetRecord
from models.sections import section_keys
from services.content import ContentRepository, resolve_section
from services.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_SORT_KEYS = {"date", "source", "title"}
ALLOWED_ORDERS = {"asc", "desc"}
DEFAULT_SEARCH_LIMIT = 100
DEFAULT_HOMEPAGE_LIMIT = 10


def _parse_timestamp(value: Any) -> Optional[datetime]:
    text = str(value or "").strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _is_bare_date(value: str) -> bool:
    return len(value.strip()) == 10 and "T" not in value


def resolve_date_bounds(date_from: Optional[str], date_to: Optional[str]):
    """
    Parse the inclusive search window.

    A bare ``dateTo`` (YYYY-MM-DD) covers that whole day, so it becomes an
    exclusive bound at the next midnight.
    """
    lower = upper = None
    upper_exclusive = False
    if date_from and date_from.strip():
        lower = _parse_timestamp(date_from)
        if lower is None:
            raise ValidationError(f"Invalid dateFrom: {date_from}")
    if date_to and date_to.strip():
        upper = _parse_timestamp(date_to)
        if upper is None:
            raise ValidationError(f"Invalid dateTo: {date_to}")
        if _is_bare_date(date_to):
            upper = upper + timedelta(days=1)
            upper_exclusive = True
    return lower, upper, upper_exclusive


def _in_window(record: SheetRecord, lower, upper, upper_exclusive: bool) -> bool:
    if lower is None and upper is None:
        return True
    stamp = _parse_timestamp(record.sort_date)
    if stamp is None:
        return False
    if lower is not None and stamp < lower:
        return False
    if upper is not None:
        if upper_exclusive and stamp >= upper:
            return False
        if not upper_exclusive and stamp > upper:
            return False
    return True


async def fan_out(
    repository: ContentRepository,
    keys: Iterable[str],
    *,
    search: str = "",
    limit: Optional[int] = None,
) -> Dict[str, List[SheetRecord]]:
    """List several sections concurrently; a failing section contributes no items."""
    keys = list(keys)
    results = await asyncio.gather(
        *(repository.list_items(key, search=search, limit=limit) for key in keys),
        return_exceptions=True,
    )
    merged: Dict[str, List[SheetRecord]] = {}
    for key, result in zip(keys, results):
        if isinstance(result, Exception):
            logger.warning("Section %s failed during fan-out: %s", key, result)
            merged[key] = []
        elif isinstance(result, BaseException):
            raise result
        else:
            merged[key] = result.items
    return merged


def _sort_key(sort: str):
    if sort == "date":
        return lambda entry: entry[1].sort_date
    return lambda entry: str(getattr(entry[1], sort, "") or "").lower()


async def search_content(
    repository: ContentRepository,
    query: str,
    *,
    limit: Optional[int] = DEFAULT_SEARCH_LIMIT,
    sections: Optional[List[str]] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    sort: str = "date",
    order: str = "desc",
) -> Dict[str, Any]:
    needle = (query or "").strip()
    if not needle:
        return {"results": [], "total": 0, "query": ""}

    sort = (sort or "date").strip().lower()
    order = (order or "desc").strip().lower()
    if sort not in ALLOWED_SORT_KEYS:
        raise ValidationError(f"sort must be one of {sorted(ALLOWED_SORT_KEYS)}")
    if order not in ALLOWED_ORDERS:
        raise ValidationError("order must be 'asc' or 'desc'")

    keys = [resolve_section(key).key for key in sections] if sections else section_keys()
    lower, upper, upper_exclusive = resolve_date_bounds(date_from, date_to)

    per_section = await fan_out(repository, keys, search=needle)
    matches = [
        (key, record)
        for key, records in per_section.items()
        for record in records
        if _in_window(record, lower, upper, upper_exclusive)
    ]
    matches.sort(key=_sort_key(sort), reverse=order == "desc")

    total = len(matches)
    if limit and limit > 0:
        matches = matches[:limit]
    return {
        "results": [{**record.to_api(), "section": key} for key, record in matches],
        "total": total,
        "query": needle,
    }


async def aggregate_homepage(
    repository: ContentRepository,
    *,
    search: str = "",
    limit: Optional[int] = DEFAULT_HOMEPAGE_LIMIT,
) -> Dict[str, List[Dict[str, Any]]]:
    """Newest items of every section, one list per section."""
    per_section = await fan_out(repository, section_keys(), search=search, limit=limit)
    return {key: [record.to_api() for record in records] for key, records in per_section.items()}
