from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from rowhook.triggers.expression import normalize_expression

_NAME = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789_$", min_size=1, max_size=24)


@given(schema=_NAME, table=_NAME)
@settings(max_examples=100, deadline=None)
def test_property_exact_expression_is_unchanged(schema: str, table: str) -> None:
    expression = f"{schema}.{table}"
    assert normalize_expression(expression) == expression


@given(schema=_NAME, table=_NAME)
@settings(max_examples=50, deadline=None)
def test_property_normalize_is_idempotent(schema: str, table: str) -> None:
    for raw in (f"{schema}.{table}", f"{schema}.", f".{table}", "*.*", ""):
        once = normalize_expression(raw)
        assert normalize_expression(once) == once


@given(schema=_NAME, table=_NAME)
@settings(max_examples=50, deadline=None)
def test_property_missing_part_becomes_wildcard(schema: str, table: str) -> None:
    assert normalize_expression(f"{schema}.") == f"{schema}.*"
    assert normalize_expression(f".{table}") == f"*.{table}"
