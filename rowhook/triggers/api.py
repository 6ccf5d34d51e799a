"""Function-style trigger registration."""

from __future__ import annotations

from dataclasses import dataclass

from rowhook.triggers.expression import normalize_expression
from rowhook.triggers.models import Statement, TriggerHandler, TriggerSpec


@dataclass(slots=True)
class TriggerRegistration:
    """Validated registration payload for ``RowHook.register(trigger(...))``."""

    spec: TriggerSpec


def trigger(
    handler: TriggerHandler,
    *,
    expression: str | None = None,
    statement: Statement | str | None = None,
    tag: str | None = None,
) -> TriggerRegistration:
    """Create a trigger registration payload.

    The expression and statement are checked here, so a bad payload fails
    where it is written rather than when it is registered.
    """
    return TriggerRegistration(
        spec=TriggerSpec(
            handler=handler,
            expression=normalize_expression(expression),
            statement=Statement.coerce(statement),
            tag=tag,
        )
    )
