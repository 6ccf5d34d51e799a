"""Turn raw binlog rows into client-facing change events."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Any

from rowhook.triggers.expression import split_path
from rowhook.triggers.models import ChangeData, ChangeEvent, Row, Statement

_MISSING = object()


def stringify(value: Any) -> str:
    """Render *value* the way the column diff compares it.

    Mirrors JavaScript ``String()`` for the scalar types the binlog produces,
    so ``1`` and ``"1"`` or ``1.0`` and ``1`` compare equal.
    """
    if value is _MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def changed_columns(before: Mapping[str, Any], after: Mapping[str, Any]) -> tuple[str, ...]:
    """Columns of *before* whose stringified value differs in *after*."""
    return tuple(
        key for key, value in before.items() if stringify(value) != stringify(after.get(key, _MISSING))
    )


def _image(row: Row | None) -> Mapping[str, Any] | None:
    return MappingProxyType(dict(row)) if row is not None else None


def build_event(action: Statement, row: Row, *, database: str, table: str, timestamp: datetime) -> ChangeEvent:
    if action is Statement.INSERT:
        data = ChangeData(old=None, new=_image(row))
        columns: tuple[str, ...] = ()
    elif action is Statement.DELETE:
        data = ChangeData(old=_image(row), new=None)
        columns = ()
    elif action is Statement.UPDATE:
        before = row.get("before") or {}
        after = row.get("after") or {}
        data = ChangeData(old=_image(before), new=_image(after))
        columns = changed_columns(before, after)
    else:
        raise ValueError(f"Cannot build an event for statement {action!r}")
    return ChangeEvent(
        action=action,
        timestamp=timestamp,
        database=database,
        table=table,
        changed_columns=columns,
        data=data,
    )


def build_events(action: Statement, rows: Iterable[Row], path: str, timestamp: datetime) -> list[ChangeEvent]:
    """Build one fresh event per row, preserving row order."""
    database, table = split_path(path)
    return [build_event(action, row, database=database, table=table, timestamp=timestamp) for row in rows]
