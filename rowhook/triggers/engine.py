"""Dispatch engine: route raw binlog batches to registered triggers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from threading import RLock
from typing import TYPE_CHECKING, Any, ClassVar

from rowhook.exceptions import UpstreamConnectionError
from rowhook.triggers.adapter import ROW_EVENT_KINDS, BinlogAdapter, MySQLBinlogAdapter
from rowhook.triggers.api import TriggerRegistration
from rowhook.triggers.events import build_events
from rowhook.triggers.expression import split_path
from rowhook.triggers.matcher import match_triggers
from rowhook.triggers.models import ACTIONS, RegistrationRejected, RowsBatch, Statement, TriggerHandler, TriggerSpec
from rowhook.triggers.registry import TriggerRegistry

if TYPE_CHECKING:
    from rowhook.config.models import RowHookConfig

logger = logging.getLogger(__name__)

ErrorListener = Callable[[UpstreamConnectionError], Any]


class RowHook:
    """Own the trigger registry and the binlog stream feeding it.

    Handlers run synchronously on the stream thread, one event at a time.
    A handler that raises is logged and skipped; delivery to the remaining
    rows and triggers of the batch continues.
    """

    STATEMENTS: ClassVar[type[Statement]] = Statement

    def __init__(self, adapter: BinlogAdapter, *, registry: TriggerRegistry | None = None) -> None:
        self._adapter = adapter
        self._registry = registry if registry is not None else TriggerRegistry()
        self._error_listeners: list[ErrorListener] = []
        self._lifecycle_lock = RLock()
        self._started = False
        self.last_error: UpstreamConnectionError | None = None

    @classmethod
    def from_config(cls, config: RowHookConfig) -> RowHook:
        """Build an engine reading the MySQL binlog described by *config*."""
        return cls(MySQLBinlogAdapter(config.mysql, config.stream))

    @property
    def registry(self) -> TriggerRegistry:
        return self._registry

    @property
    def is_running(self) -> bool:
        return self._started and self._adapter.running

    # ------------------------------------------------------------------
    # registration
    # ------------------------------------------------------------------

    def add(self, spec: TriggerSpec | Mapping[str, Any] | None = None, /, **kwargs: Any) -> str | RegistrationRejected:
        """Register a trigger; returns its tag or a falsy ``RegistrationRejected``.

        Accepts a ``TriggerSpec``, a mapping with the same keys, or keyword
        arguments (``handler``, ``expression``, ``statement``, ``tag``).
        """
        if spec is None:
            spec = TriggerSpec(**kwargs)
        elif isinstance(spec, Mapping):
            spec = TriggerSpec(**{**spec, **kwargs})
        elif kwargs:
            raise TypeError("Pass either a TriggerSpec or keyword arguments, not both")
        return self._registry.add(spec)

    def register(self, registration: TriggerRegistration) -> str | RegistrationRejected:
        """Register a payload built by :func:`rowhook.triggers.api.trigger`."""
        return self._registry.add(registration.spec)

    def on(
        self,
        expression: str | None = None,
        *,
        statement: Statement | str | None = None,
        tag: str | None = None,
    ) -> Callable[[TriggerHandler], TriggerHandler]:
        """Decorator form of :meth:`add`.

        Raises:
            ValueError: If the tag or expression is already registered.
        """

        def decorator(fn: TriggerHandler) -> TriggerHandler:
            result = self.add(TriggerSpec(handler=fn, expression=expression, statement=statement, tag=tag))
            if isinstance(result, RegistrationRejected):
                raise ValueError(f"Cannot register {getattr(fn, '__name__', fn)!s}: {result.message}")
            return fn

        return decorator

    def start(self, tag: str) -> RowHook:
        self._registry.enable(tag)
        return self

    def stop(self, tag: str) -> RowHook:
        self._registry.disable(tag)
        return self

    enable = start
    disable = stop

    def remove(self, tag: str) -> RowHook:
        self._registry.remove(tag)
        return self

    # ------------------------------------------------------------------
    # stream lifecycle
    # ------------------------------------------------------------------

    def start_all(self) -> RowHook:
        """Start tailing the binlog from its current position."""
        with self._lifecycle_lock:
            if self._started and self._adapter.running:
                return self
            self.last_error = None
            self._started = True
            try:
                self._adapter.start(
                    self.dispatch,
                    self._on_upstream_error,
                    only_kinds=ROW_EVENT_KINDS,
                    start_at_end=True,
                )
            except Exception:
                self._started = False
                raise
        return self

    def stop_all(self) -> RowHook:
        """Stop the binlog stream. In-flight handler calls are allowed to finish."""
        with self._lifecycle_lock:
            if not self._started:
                return self
            self._started = False
        self._adapter.stop()
        return self

    def wait(self, timeout: float | None = None) -> None:
        """Block until the stream thread exits or *timeout* elapses."""
        self._adapter.join(timeout)

    def on_error(self, callback: ErrorListener) -> ErrorListener:
        """Register a listener for upstream stream failures."""
        self._error_listeners.append(callback)
        return callback

    def _on_upstream_error(self, exc: BaseException) -> None:
        error = (
            exc
            if isinstance(exc, UpstreamConnectionError)
            else UpstreamConnectionError(f"Binlog stream failed: {exc}", cause=exc)
        )
        self.stop_all()
        self.last_error = error
        logger.error("Replication stream stopped after upstream error: %s", error)
        for listener in list(self._error_listeners):
            try:
                listener(error)
            except Exception:
                logger.exception("Upstream error listener %r failed", listener)

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------

    def dispatch(self, batch: RowsBatch) -> int:
        """Deliver *batch* to every matching trigger; returns successful handler calls."""
        action = ACTIONS.get(batch.kind)
        if action is None:
            logger.debug("Ignoring binlog batch kind %r on %s", batch.kind, batch.path)
            return 0

        database, table = split_path(batch.path)
        triggers = match_triggers(self._registry, database, table, action)
        if not triggers:
            return 0

        events = build_events(action, batch.rows, batch.path, batch.timestamp)
        delivered = 0
        for trigger in triggers:
            for event in events:
                try:
                    trigger.handler(event)
                except Exception:
                    logger.exception(
                        "Handler for trigger %s failed on %s %s.%s",
                        trigger.tag,
                        action.value,
                        database,
                        table,
                    )
                else:
                    delivered += 1
        return delivered
