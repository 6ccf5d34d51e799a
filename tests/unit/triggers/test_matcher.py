from __future__ import annotations

from rowhook.triggers.matcher import match_triggers
from rowhook.triggers.models import ChangeEvent, Statement, TriggerSpec
from rowhook.triggers.registry import TriggerRegistry


def _noop(event: ChangeEvent) -> None:  # noqa: ARG001
    return None


def _tiered_registry() -> TriggerRegistry:
    registry = TriggerRegistry()
    registry.add(TriggerSpec(handler=_noop, tag="global", expression="*", statement=Statement.ALL))
    registry.add(TriggerSpec(handler=_noop, tag="schema", expression="shop.*", statement=Statement.UPDATE))
    registry.add(TriggerSpec(handler=_noop, tag="table", expression="*.orders", statement=Statement.INSERT))
    registry.add(TriggerSpec(handler=_noop, tag="exact", expression="shop.orders", statement=Statement.DELETE))
    return registry


def test_insert_matches_global_and_table_wildcard_only() -> None:
    matched = match_triggers(_tiered_registry(), "shop", "orders", Statement.INSERT)
    assert [trigger.tag for trigger in matched] == ["global", "table"]


def test_update_and_delete_pick_their_tiers() -> None:
    registry = _tiered_registry()
    assert [t.tag for t in match_triggers(registry, "shop", "orders", Statement.UPDATE)] == ["global", "schema"]
    assert [t.tag for t in match_triggers(registry, "shop", "orders", Statement.DELETE)] == ["global", "exact"]


def test_all_four_tiers_fire_in_fixed_order() -> None:
    registry = TriggerRegistry()
    for tag, expression in [("d", "shop.orders"), ("c", "*.orders"), ("b", "shop.*"), ("a", "*")]:
        registry.add(TriggerSpec(handler=_noop, tag=tag, expression=expression))
    matched = match_triggers(registry, "shop", "orders", Statement.UPDATE)
    assert [trigger.tag for trigger in matched] == ["a", "b", "c", "d"]


def test_unrelated_table_only_hits_global() -> None:
    matched = match_triggers(_tiered_registry(), "crm", "contacts", Statement.INSERT)
    assert [trigger.tag for trigger in matched] == ["global"]


def test_disabled_trigger_is_skipped() -> None:
    registry = _tiered_registry()
    registry.disable("global")
    matched = match_triggers(registry, "shop", "orders", Statement.INSERT)
    assert [trigger.tag for trigger in matched] == ["table"]


def test_empty_registry_matches_nothing() -> None:
    assert match_triggers(TriggerRegistry(), "shop", "orders", Statement.INSERT) == []
