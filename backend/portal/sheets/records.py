"""Helpers over lists of sheet rows (plain dicts).

All helpers return new lists and leave the input rows untouched.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ValidationError

from portal.sheets.client import SheetRow

logger = logging.getLogger(__name__)

HIDDEN = "***HIDDEN***"

NIK_FIELDS = ("nik", "NIK", "nik_encrypted")
KK_FIELDS = ("kk", "KK", "no_kk", "kk_encrypted")

ModelT = TypeVar("ModelT", bound=BaseModel)


def is_active(row: SheetRow) -> bool:
    return row.get("status_aktif") in ("Aktif", "aktif") or row.get("status") in ("Aktif", "aktif")


def filter_active_records(rows: list[SheetRow]) -> list[SheetRow]:
    return [row for row in rows if is_active(row)]


def sanitize_warga_data(rows: list[SheetRow]) -> list[SheetRow]:
    """Drop every NIK/KK variant and replace them with the hidden marker."""
    sanitized = []
    for row in rows:
        safe = {k: v for k, v in row.items() if k not in NIK_FIELDS + KK_FIELDS}
        safe["nik"] = HIDDEN
        safe["kk"] = HIDDEN
        sanitized.append(safe)
    return sanitized


def search_records(rows: list[SheetRow], field: str, value: str) -> list[SheetRow]:
    needle = value.lower()
    return [row for row in rows if needle in str(row.get(field) or "").lower()]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def sort_records(
    rows: list[SheetRow],
    field: str,
    order: Literal["asc", "desc"] = "asc",
) -> list[SheetRow]:
    """Numeric sort when every value is a number, else case-insensitive text."""
    reverse = order == "desc"
    if rows and all(_is_number(row.get(field)) for row in rows):
        return sorted(rows, key=lambda row: row[field], reverse=reverse)
    return sorted(rows, key=lambda row: str(row.get(field) or "").lower(), reverse=reverse)


def paginate_records(rows: list, page: int = 1, limit: int = 10) -> dict:
    page = max(page, 1)
    limit = max(limit, 1)
    offset = (page - 1) * limit
    total = len(rows)
    return {
        "data": rows[offset:offset + limit],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit),
            "hasNext": offset + limit < total,
            "hasPrev": page > 1,
        },
    }


def next_id(rows: list[SheetRow]) -> int:
    """max(id) + 1 over the rows; non-numeric ids count as 0."""
    highest = 0
    for row in rows:
        try:
            highest = max(highest, int(row.get("id") or 0))
        except (TypeError, ValueError):
            continue
    return highest + 1


def parse_rows(model: type[ModelT], rows: list[SheetRow]) -> tuple[list[ModelT], list[str]]:
    """Validate rows into ``model``. Malformed rows are reported, not passed on.

    Row numbers in the errors are sheet row numbers (header is row 1).
    """
    records: list[ModelT] = []
    errors: list[str] = []
    for index, row in enumerate(rows, start=2):
        try:
            records.append(model.model_validate(row))
        except ValidationError as exc:
            fields = sorted({".".join(str(p) for p in e["loc"]) for e in exc.errors()})
            message = f"row {index}: invalid {', '.join(fields)}"
            errors.append(message)
            logger.warning("Skipping malformed %s %s", model.__name__, message)
    return records, errors
