"""Trigger registry: tag and expression ownership for live subscriptions."""

from __future__ import annotations

import logging
import secrets
import string
from collections.abc import Iterator
from threading import RLock

from rowhook.exceptions import InvalidHandler
from rowhook.triggers.expression import normalize_expression
from rowhook.triggers.models import RegistrationRejected, Statement, Trigger, TriggerSpec

logger = logging.getLogger(__name__)

TAG_ALPHABET = string.ascii_lowercase + string.digits
TAG_LENGTH = 7


class TriggerRegistry:
    """Own the tag -> trigger and expression -> tag maps.

    Both maps change together under one lock, so every expression entry
    always points at a live trigger and dispatch may run on another thread.
    """

    def __init__(self) -> None:
        self._triggers: dict[str, Trigger] = {}
        self._expressions: dict[str, str] = {}
        self._lock = RLock()

    def add(self, spec: TriggerSpec) -> str | RegistrationRejected:
        """Register *spec* and return its tag.

        Returns a falsy ``RegistrationRejected`` when the tag or the expression
        is already owned; nothing is recorded in that case.

        Raises:
            InvalidHandler: If ``spec.handler`` is not callable.
            InvalidExpression: If ``spec.expression`` cannot be normalized.
            ValueError: If ``spec.statement`` is not a known statement.
        """
        if not callable(spec.handler):
            raise InvalidHandler("Trigger handler must be callable")
        expression = normalize_expression(spec.expression)
        statement = Statement.coerce(spec.statement)
        requested_tag = spec.tag.strip() if isinstance(spec.tag, str) else spec.tag

        with self._lock:
            tag = requested_tag or self.generate_tag()
            if tag in self._triggers:
                rejected = RegistrationRejected(reason="tag", tag=tag, expression=expression, owner=tag)
            elif expression in self._expressions:
                rejected = RegistrationRejected(
                    reason="expression",
                    tag=tag,
                    expression=expression,
                    owner=self._expressions[expression],
                )
            else:
                self._triggers[tag] = Trigger(
                    tag=tag,
                    expression=expression,
                    statement=statement,
                    handler=spec.handler,
                )
                self._expressions[expression] = tag
                logger.info("Registered trigger tag=%s expression=%s statement=%s", tag, expression, statement.value)
                return tag

        logger.warning("Trigger registration rejected: %s", rejected.message)
        return rejected

    def generate_tag(self) -> str:
        """Return a random tag that no live trigger owns."""
        with self._lock:
            while True:
                tag = "".join(secrets.choice(TAG_ALPHABET) for _ in range(TAG_LENGTH))
                if tag not in self._triggers:
                    return tag

    def enable(self, tag: str) -> TriggerRegistry:
        return self._set_enabled(tag, True)

    def disable(self, tag: str) -> TriggerRegistry:
        return self._set_enabled(tag, False)

    def _set_enabled(self, tag: str, enabled: bool) -> TriggerRegistry:
        with self._lock:
            trigger = self._triggers.get(tag)
            if trigger is not None and trigger.enabled != enabled:
                trigger.enabled = enabled
                logger.debug("Trigger %s %s", tag, "enabled" if enabled else "disabled")
        return self

    def remove(self, tag: str) -> TriggerRegistry:
        """Drop *tag* and release its expression. Unknown tags are ignored."""
        with self._lock:
            trigger = self._triggers.pop(tag, None)
            if trigger is None:
                return self
            if self._expressions.get(trigger.expression) == tag:
                del self._expressions[trigger.expression]
        logger.info("Removed trigger tag=%s expression=%s", tag, trigger.expression)
        return self

    def clear(self) -> None:
        with self._lock:
            self._triggers.clear()
            self._expressions.clear()

    def get(self, tag: str) -> Trigger | None:
        with self._lock:
            return self._triggers.get(tag)

    def tag_for(self, expression: str) -> str | None:
        with self._lock:
            return self._expressions.get(expression)

    def lookup(self, expression: str) -> Trigger | None:
        """Return the trigger owning the canonical *expression*, if any."""
        with self._lock:
            tag = self._expressions.get(expression)
            if tag is None:
                return None
            return self._triggers.get(tag)

    @property
    def lock(self) -> RLock:
        return self._lock

    def __contains__(self, tag: object) -> bool:
        with self._lock:
            return tag in self._triggers

    def __len__(self) -> int:
        with self._lock:
            return len(self._triggers)

    def __iter__(self) -> Iterator[Trigger]:
        with self._lock:
            snapshot = list(self._triggers.values())
        return iter(snapshot)
