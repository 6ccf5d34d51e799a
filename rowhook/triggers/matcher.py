"""Resolve which triggers receive a change on one concrete table."""

from __future__ import annotations

from rowhook.triggers.expression import candidate_expressions
from rowhook.triggers.models import Statement, Trigger
from rowhook.triggers.registry import TriggerRegistry


def match_triggers(registry: TriggerRegistry, database: str, table: str, action: Statement) -> list[Trigger]:
    """Return enabled triggers accepting *action* on ``database.table``.

    Every owned candidate fires; there is no most-specific-wins suppression.
    Order is fixed: ``*``, ``db.*``, ``*.table``, ``db.table``.
    """
    matched: list[Trigger] = []
    with registry.lock:
        for expression in candidate_expressions(database, table):
            trigger = registry.lookup(expression)
            if trigger is not None and trigger.accepts(action):
                matched.append(trigger)
    return matched
