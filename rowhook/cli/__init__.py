"""CLI tools: rowhook init, rowhook check, rowhook watch."""

import sys
from importlib import metadata

import typer

from rowhook.exceptions import InvalidExpression

app = typer.Typer(
    name="rowhook",
    help="rowhook: subscribe to MySQL row changes.",
    no_args_is_help=True,
)


def _print_version_and_exit() -> None:
    """Print installed package version and exit."""
    try:
        version = metadata.version("rowhook")
    except metadata.PackageNotFoundError:
        version = "unknown"
    print(f"rowhook {version}")
    raise SystemExit(0)


@app.command("init")
def init_command(
    path: str = typer.Option(".", "--path", help="Output directory or .yaml file path"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing rowhook.yaml"),
) -> None:
    """Generate default rowhook.yaml in target directory."""
    from rowhook.cli.init_config import init_config_command

    try:
        init_config_command(path=path, force=force)
    except FileExistsError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


@app.command("check")
def check_command(
    expressions: list[str] = typer.Argument(..., help="Expressions such as shop.orders, shop.*, *.orders, *"),
) -> None:
    """Print the canonical form of trigger expressions."""
    from rowhook.cli.check import check_expressions_command

    try:
        check_expressions_command(expressions)
    except InvalidExpression as exc:
        raise typer.Exit(1) from exc


@app.command("watch")
def watch(
    config: str = typer.Option("", "--config", help="Optional config file path"),
    expression: list[str] = typer.Option(
        [], "--expression", "-e", help="Expression to watch; repeatable. Overrides configured triggers."
    ),
    statement: str = typer.Option("", "--statement", "-s", help="INSERT, UPDATE, DELETE or ALL"),
) -> None:
    """Tail the binlog and print matching row changes as JSON lines."""
    from rowhook.cli.watch import watch_command

    try:
        code = watch_command(config=config or None, expressions=expression or None, statement=statement or None)
    except ValueError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(2) from exc
    if code:
        raise typer.Exit(code)


def main() -> None:
    """CLI entry point."""
    if "--version" in sys.argv[1:] or "-V" in sys.argv[1:]:
        _print_version_and_exit()
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(130)
