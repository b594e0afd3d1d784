"""Shared base for records persisted as fixed-width spreadsheet rows."""

from typing import Any, ClassVar, Dict, List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DELETED_STATUSES = frozenset({"deleted", "archived"})


class SheetRecord(BaseModel):
    """
    A record backed by one spreadsheet row.

    ``COLUMNS`` fixes the column order on the sheet (column A first). Rows are
    converted at the store boundary: short rows are padded with empty cells,
    cells beyond the last column are ignored, and an empty status cell falls
    back to ``DEFAULT_STATUS``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    COLUMNS: ClassVar[Tuple[str, ...]] = ()
    SEARCH_FIELDS: ClassVar[Tuple[str, ...]] = ()
    DATE_FIELD: ClassVar[str] = "date_added"
    DEFAULT_STATUS: ClassVar[str] = "active"

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "SheetRecord":
        width = len(cls.COLUMNS)
        cells = ["" if cell is None else str(cell) for cell in list(row)[:width]]
        cells.extend([""] * (width - len(cells)))
        values = dict(zip(cls.COLUMNS, cells))
        if not values.get("status"):
            values["status"] = cls.DEFAULT_STATUS
        return cls(**values)

    def to_row(self) -> List[str]:
        return [_to_cell(getattr(self, column)) for column in self.COLUMNS]

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match over the searchable fields."""
        lowered = needle.lower()
        return any(lowered in str(getattr(self, field) or "").lower() for field in self.SEARCH_FIELDS)

    @property
    def is_deleted(self) -> bool:
        return self.status.strip().lower() in DELETED_STATUSES

    @property
    def sort_date(self) -> str:
        return str(getattr(self, self.DATE_FIELD) or "")


def _to_cell(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if value is None:
        return ""
    return str(value)
