from __future__ import annotations

from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Iterable

from backoffice.application.ports.record_store import Filter, Sort


def matches(record: Any, filter: Filter | None) -> bool:
    for name, expected in (filter or {}).items():
        actual = getattr(record, name, None)
        if isinstance(expected, dict):
            if not _matches_operators(actual, expected):
                return False
        elif actual != expected:
            return False
    return True


def _matches_operators(actual: Any, operators: dict[str, Any]) -> bool:
    for op, operand in operators.items():
        if op == "$in":
            if actual not in operand:
                return False
        elif op == "$ne":
            if actual == operand:
                return False
        elif op == "$gte":
            if actual is None or actual < operand:
                return False
        elif op == "$lte":
            if actual is None or actual > operand:
                return False
        else:
            raise ValueError(f"Unsupported filter operator: {op}")
    return True


def apply_sort(records: list[Any], sort: Sort | None) -> list[Any]:
    ordered = list(records)
    # Apply keys last to first so the first key dominates (stable sort).
    for name, direction in reversed(sort or []):
        ordered.sort(key=lambda r: _sort_key(getattr(r, name, None)), reverse=direction < 0)
    return ordered


def _sort_key(value: Any) -> tuple[int, Any]:
    if value is None:
        return (0, 0)
    return (1, value)


def apply_patch(record: Any, patch: dict[str, Any]) -> Any:
    known = {f.name for f in fields(record)}
    unknown = set(patch) - known
    if unknown:
        raise ValueError(f"Unknown fields for {type(record).__name__}: {sorted(unknown)}")
    changes = dict(patch)
    if "updated_at" in known and "updated_at" not in changes:
        changes["updated_at"] = datetime.now()
    return replace(record, **changes)


def find_clash(records: Iterable[Any], candidate: Any, unique_fields: tuple[str, ...], skip: Any = None) -> str | None:
    """Name of the first unique field candidate shares with another record."""
    for field_name in unique_fields:
        value = getattr(candidate, field_name, None)
        if value is None:
            continue
        for existing in records:
            if existing is skip:
                continue
            if getattr(existing, field_name, None) == value:
                return field_name
    return None


UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {
    "bookings": ("booking_id",),
    "clients": ("phone",),
    "staff": ("phone",),
    "expenses": ("expense_id",),
}
