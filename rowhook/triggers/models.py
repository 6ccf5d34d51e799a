"""Data models shared by the trigger registry, matcher, builder and engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal, Protocol


class Statement(str, Enum):
    """Row action a trigger accepts. ``ALL`` is a subscription-side wildcard."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ALL = "ALL"

    @classmethod
    def coerce(cls, value: Statement | str | None) -> Statement:
        if value is None or value == "":
            return cls.ALL
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"statement must be a string, got {type(value).__name__}")
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown statement {value!r}; expected one of {allowed}") from exc


# Raw binlog event names emitted by the stream adapter.
ACTIONS: dict[str, Statement] = {
    "writerows": Statement.INSERT,
    "updaterows": Statement.UPDATE,
    "deleterows": Statement.DELETE,
}

Row = Mapping[str, Any]


class TriggerHandler(Protocol):
    """Anything callable with a single ``ChangeEvent``."""

    def __call__(self, event: ChangeEvent) -> None: ...


@dataclass(slots=True)
class TriggerSpec:
    """What a caller asks for when registering a trigger."""

    handler: TriggerHandler
    expression: str | None = None
    statement: Statement | str | None = None
    tag: str | None = None


@dataclass(slots=True)
class Trigger:
    """One live registry entry."""

    tag: str
    expression: str
    statement: Statement
    handler: TriggerHandler
    enabled: bool = True

    def accepts(self, action: Statement) -> bool:
        return self.enabled and (self.statement is Statement.ALL or self.statement is action)


@dataclass(frozen=True, slots=True)
class RegistrationRejected:
    """Falsy result of ``add`` when the tag or expression is already owned."""

    reason: Literal["tag", "expression"]
    tag: str
    expression: str
    owner: str

    def __bool__(self) -> bool:
        return False

    @property
    def message(self) -> str:
        if self.reason == "tag":
            return f"tag {self.tag!r} is already registered"
        return f"expression {self.expression!r} is already owned by tag {self.owner!r}"


@dataclass(frozen=True, slots=True)
class RowsBatch:
    """One raw per-table change batch handed over by the stream adapter."""

    schema: str
    table: str
    kind: str
    timestamp: datetime
    rows: tuple[Row, ...] = ()
    table_id: int | None = None

    @property
    def path(self) -> str:
        return f"{self.schema}.{self.table}"


@dataclass(frozen=True, slots=True)
class ChangeData:
    """Read-only before and after images of one row."""

    old: Mapping[str, Any] | None = None
    new: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Client-facing change for exactly one row."""

    action: Statement
    timestamp: datetime
    database: str
    table: str
    changed_columns: tuple[str, ...] = ()
    data: ChangeData = field(default_factory=ChangeData)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "timestamp": self.timestamp.isoformat(),
            "database": self.database,
            "table": self.table,
            "changedColumns": list(self.changed_columns),
            "data": {"old": _plain(self.data.old), "new": _plain(self.data.new)},
        }


def _plain(image: Mapping[str, Any] | None) -> dict[str, Any] | None:
    return dict(image) if image is not None else None
