"""Row-change triggers: registry, matcher, event builder and dispatch engine."""

from rowhook.triggers.adapter import BinlogAdapter, MySQLBinlogAdapter, to_batch
from rowhook.triggers.api import TriggerRegistration, trigger
from rowhook.triggers.engine import RowHook
from rowhook.triggers.events import build_events, changed_columns
from rowhook.triggers.expression import candidate_expressions, normalize_expression
from rowhook.triggers.matcher import match_triggers
from rowhook.triggers.models import (
    ACTIONS,
    ChangeData,
    ChangeEvent,
    RegistrationRejected,
    RowsBatch,
    Statement,
    Trigger,
    TriggerHandler,
    TriggerSpec,
)
from rowhook.triggers.registry import TriggerRegistry

__all__ = [
    "ACTIONS",
    "BinlogAdapter",
    "ChangeData",
    "ChangeEvent",
    "MySQLBinlogAdapter",
    "RegistrationRejected",
    "RowHook",
    "RowsBatch",
    "Statement",
    "Trigger",
    "TriggerHandler",
    "TriggerRegistration",
    "TriggerRegistry",
    "TriggerSpec",
    "build_events",
    "candidate_expressions",
    "changed_columns",
    "match_triggers",
    "normalize_expression",
    "to_batch",
    "trigger",
]
