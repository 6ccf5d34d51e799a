"""Canonicalization of ``schema.table`` trigger expressions.

Every expression collapses to one of four shapes, which are used verbatim as
registry keys::

    *            every schema and table
    shop.*       every table in schema ``shop``
    *.orders     table ``orders`` in any schema
    shop.orders  exactly one table
"""

from __future__ import annotations

from rowhook.exceptions import InvalidExpression

WILDCARD = "*"


def normalize_expression(expression: str | None) -> str:
    """Return the canonical form of *expression* or raise ``InvalidExpression``."""
    if expression is None:
        return WILDCARD
    if not isinstance(expression, str):
        raise InvalidExpression(expression)
    stripped = expression.strip()
    if stripped in {"", WILDCARD, "*.*"}:
        return WILDCARD

    parts = stripped.split(".")
    if len(parts) != 2:
        raise InvalidExpression(expression)
    schema, table = parts
    if (schema or WILDCARD) == WILDCARD and (table or WILDCARD) == WILDCARD:
        return WILDCARD
    return f"{schema or WILDCARD}.{table or WILDCARD}"


def candidate_expressions(database: str, table: str) -> tuple[str, str, str, str]:
    """Registry keys that can own a change on ``database.table``, broadest first."""
    return (
        WILDCARD,
        f"{database}.{WILDCARD}",
        f"{WILDCARD}.{table}",
        f"{database}.{table}",
    )


def split_path(path: str) -> tuple[str, str]:
    """Split a concrete ``schema.table`` path on its first separator."""
    database, _, table = path.partition(".")
    return database, table
