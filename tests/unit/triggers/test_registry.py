from __future__ import annotations

import threading

import pytest

from rowhook.exceptions import InvalidExpression, InvalidHandler
from rowhook.triggers.models import ChangeEvent, RegistrationRejected, Statement, TriggerSpec
from rowhook.triggers.registry import TAG_ALPHABET, TAG_LENGTH, TriggerRegistry


def _noop(event: ChangeEvent) -> None:  # noqa: ARG001
    return None


def test_add_applies_defaults_and_returns_generated_tag() -> None:
    registry = TriggerRegistry()
    tag = registry.add(TriggerSpec(handler=_noop))

    assert isinstance(tag, str)
    assert len(tag) == TAG_LENGTH
    assert set(tag) <= set(TAG_ALPHABET)
    trigger = registry.get(tag)
    assert trigger is not None
    assert trigger.expression == "*"
    assert trigger.statement is Statement.ALL
    assert trigger.enabled is True


def test_add_keeps_explicit_tag_and_normalizes_expression() -> None:
    registry = TriggerRegistry()
    tag = registry.add(TriggerSpec(handler=_noop, tag="orders", expression=".orders", statement="insert"))

    assert tag == "orders"
    assert registry.tag_for("*.orders") == "orders"
    assert registry.get("orders").statement is Statement.INSERT  # type: ignore[union-attr]


def test_non_callable_handler_is_rejected_without_state() -> None:
    registry = TriggerRegistry()
    with pytest.raises(InvalidHandler):
        registry.add(TriggerSpec(handler="not callable", tag="x"))  # type: ignore[arg-type]
    assert len(registry) == 0


def test_invalid_expression_raises_without_state() -> None:
    registry = TriggerRegistry()
    with pytest.raises(InvalidExpression):
        registry.add(TriggerSpec(handler=_noop, expression="a.b.c"))
    assert len(registry) == 0


def test_unknown_statement_raises() -> None:
    registry = TriggerRegistry()
    with pytest.raises(ValueError, match="Unknown statement"):
        registry.add(TriggerSpec(handler=_noop, statement="TRUNCATE"))


def test_duplicate_tag_and_duplicate_expression_are_rejected() -> None:
    registry = TriggerRegistry()
    first = registry.add(TriggerSpec(handler=_noop, tag="t1", expression="shop.orders"))
    assert first == "t1"

    same_tag = registry.add(TriggerSpec(handler=_noop, tag="t1", expression="shop.items"))
    assert isinstance(same_tag, RegistrationRejected)
    assert not same_tag
    assert same_tag.reason == "tag"

    same_expression = registry.add(TriggerSpec(handler=_noop, tag="t2", expression="shop.orders"))
    assert isinstance(same_expression, RegistrationRejected)
    assert same_expression.reason == "expression"
    assert same_expression.owner == "t1"
    assert "t2" not in registry
    assert registry.tag_for("shop.items") is None

    third = registry.add(TriggerSpec(handler=_noop, expression="shop.items"))
    assert isinstance(third, str)
    assert third not in {"t1", "t2"}
    assert len(registry) == 2


def test_wildcard_spellings_share_one_expression_slot() -> None:
    registry = TriggerRegistry()
    assert registry.add(TriggerSpec(handler=_noop, expression="*.*"))
    rejected = registry.add(TriggerSpec(handler=_noop, expression=""))
    assert isinstance(rejected, RegistrationRejected)
    assert rejected.expression == "*"


def test_enable_disable_are_idempotent_and_chainable() -> None:
    registry = TriggerRegistry()
    registry.add(TriggerSpec(handler=_noop, tag="t1"))

    assert registry.disable("t1") is registry
    once = registry.get("t1").enabled  # type: ignore[union-attr]
    registry.disable("t1")
    assert registry.get("t1").enabled is once is False  # type: ignore[union-attr]

    registry.enable("t1").enable("t1")
    assert registry.get("t1").enabled is True  # type: ignore[union-attr]


def test_enable_disable_remove_unknown_tag_are_noops() -> None:
    registry = TriggerRegistry()
    registry.add(TriggerSpec(handler=_noop, tag="t1", expression="shop.orders"))
    registry.enable("missing").disable("missing").remove("missing")
    assert len(registry) == 1
    assert registry.tag_for("shop.orders") == "t1"


def test_remove_releases_expression_for_reregistration() -> None:
    registry = TriggerRegistry()
    registry.add(TriggerSpec(handler=_noop, tag="old", expression="shop.orders"))
    registry.remove("old")

    assert "old" not in registry
    assert registry.tag_for("shop.orders") is None
    assert registry.lookup("shop.orders") is None

    tag = registry.add(TriggerSpec(handler=_noop, tag="new", expression="shop.orders"))
    assert tag == "new"
    assert registry.tag_for("shop.orders") == "new"
    assert registry.get("old") is None


def test_generate_tag_retries_on_collision(monkeypatch: pytest.MonkeyPatch) -> None:
    registry = TriggerRegistry()
    registry.add(TriggerSpec(handler=_noop, tag="aaaaaaa"))

    draws = iter("aaaaaaa" + "bbbbbbb")
    monkeypatch.setattr("rowhook.triggers.registry.secrets.choice", lambda _alphabet: next(draws))

    assert registry.generate_tag() == "bbbbbbb"


def test_iteration_is_a_snapshot_in_registration_order() -> None:
    registry = TriggerRegistry()
    for index, expression in enumerate(["*", "shop.*", "*.orders"]):
        registry.add(TriggerSpec(handler=_noop, tag=f"t{index}", expression=expression))

    tags = []
    for trigger in registry:
        tags.append(trigger.tag)
        registry.remove(trigger.tag)
    assert tags == ["t0", "t1", "t2"]
    assert len(registry) == 0


def test_clear_empties_both_maps() -> None:
    registry = TriggerRegistry()
    registry.add(TriggerSpec(handler=_noop, tag="t1", expression="shop.orders"))
    registry.clear()
    assert len(registry) == 0
    assert registry.tag_for("shop.orders") is None


def test_concurrent_registration_keeps_expressions_unique() -> None:
    registry = TriggerRegistry()
    results: list[object] = []
    lock = threading.Lock()

    def _register() -> None:
        result = registry.add(TriggerSpec(handler=_noop, expression="shop.orders"))
        with lock:
            results.append(result)

    threads = [threading.Thread(target=_register) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sum(1 for result in results if isinstance(result, str)) == 1
    assert len(registry) == 1
