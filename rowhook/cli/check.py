"""Expression check command."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from rowhook.exceptions import InvalidExpression
from rowhook.triggers.expression import normalize_expression

console = Console()


def check_expressions_command(expressions: list[str]) -> list[str]:
    """Print the canonical form of each expression.

    Raises:
        InvalidExpression: On the first expression that does not normalize.
    """
    canonical: list[str] = []
    for expression in expressions:
        try:
            normalized = normalize_expression(expression)
        except InvalidExpression:
            console.print(f"[red]invalid[/red] {escape(repr(expression))}")
            raise
        console.print(f"{escape(repr(expression))} -> [bold]{escape(normalized)}[/bold]")
        canonical.append(normalized)
    return canonical
