"""
rowhook - subscribe to MySQL row changes.

Usage:
    from rowhook import RowHook, Statement
    from rowhook.config import ConfigManager

    hook = RowHook.from_config(ConfigManager.load().get())

    @hook.on("shop.orders", statement=Statement.INSERT)
    def on_order(event):
        print(event.to_dict())

    hook.start_all()
"""

from rowhook.exceptions import (
    InvalidExpression,
    InvalidHandler,
    RowHookError,
    UpstreamConnectionError,
)
from rowhook.triggers import (
    ChangeEvent,
    RegistrationRejected,
    RowHook,
    Statement,
    TriggerSpec,
    trigger,
)

__version__ = "0.1.0"
__all__ = [
    "ChangeEvent",
    "InvalidExpression",
    "InvalidHandler",
    "RegistrationRejected",
    "RowHook",
    "RowHookError",
    "Statement",
    "TriggerSpec",
    "UpstreamConnectionError",
    "trigger",
]
