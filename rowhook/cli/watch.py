"""Tail the binlog and print matching row changes as JSON lines."""

from __future__ import annotations

import json
import logging
import signal
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from types import FrameType
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from rowhook.config import ConfigManager, RowHookConfig, TriggerConfig
from rowhook.triggers.engine import RowHook
from rowhook.triggers.models import ChangeEvent, RegistrationRejected, Statement, TriggerSpec

console = Console(stderr=True)
logger = logging.getLogger(__name__)

HookFactory = Callable[[RowHookConfig], RowHook]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def print_event(event: ChangeEvent) -> None:
    typer.echo(json.dumps(event.to_dict(), default=str, ensure_ascii=False))


def resolve_triggers(
    config: RowHookConfig,
    expressions: list[str] | None,
    statement: str | None,
) -> list[TriggerConfig]:
    """CLI expressions replace the configured triggers; nothing at all means ``*``."""
    if expressions:
        return [TriggerConfig(expression=expression, statement=statement or Statement.ALL) for expression in expressions]
    if config.triggers:
        return list(config.triggers)
    return [TriggerConfig(expression="*", statement=statement or Statement.ALL)]


@contextmanager
def forward_signals(hook: RowHook) -> Iterator[None]:
    """Translate SIGINT/SIGTERM into ``hook.stop_all()`` for the duration of the block."""

    def _handler(signum: int, _frame: FrameType | None) -> None:
        logger.info("Received %s, stopping stream", signal.Signals(signum).name)
        hook.stop_all()

    previous: dict[int, Any] = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, _handler)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def watch_command(
    config: str | None = None,
    expressions: list[str] | None = None,
    statement: str | None = None,
    *,
    hook_factory: HookFactory = RowHook.from_config,
    install_signals: bool = True,
    poll_interval: float = 0.5,
) -> int:
    """Run until the stream stops; returns the process exit code."""
    cfg = ConfigManager.load(config_path=config).get()
    configure_logging(cfg.logging.level)

    hook = hook_factory(cfg)
    registered = 0
    for trigger_cfg in resolve_triggers(cfg, expressions, statement):
        result = hook.add(
            TriggerSpec(
                handler=print_event,
                expression=trigger_cfg.expression,
                statement=trigger_cfg.statement,
                tag=trigger_cfg.tag,
            )
        )
        if isinstance(result, RegistrationRejected):
            console.print(f"[yellow]Skipped[/yellow] {escape(trigger_cfg.expression)}: {escape(result.message)}")
            continue
        console.print(f"[green]Watching[/green] {escape(trigger_cfg.expression)} ({trigger_cfg.statement.value}) tag={result}")
        registered += 1

    if not registered:
        console.print("[red]No triggers registered[/red]")
        return 2

    if install_signals:
        with forward_signals(hook):
            _run(hook, poll_interval)
    else:
        _run(hook, poll_interval)
    hook.wait(cfg.stream.join_timeout_seconds)

    if hook.last_error is not None:
        console.print(f"[red]Stream failed:[/red] {escape(str(hook.last_error))}")
        return 1
    return 0


def _run(hook: RowHook, poll_interval: float) -> None:
    hook.start_all()
    while hook.is_running:
        hook.wait(poll_interval)
    hook.stop_all()
