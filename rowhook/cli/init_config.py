"""``rowhook init``: write the bundled configuration template."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from rowhook.config.loader import DEFAULT_FILENAME

console = Console()

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def read_template() -> str:
    return resources.files("rowhook.templates").joinpath(DEFAULT_FILENAME).read_text(encoding="utf-8")


def target_file(path: str) -> Path:
    """A ``.yaml``/``.yml`` *path* names the file itself; anything else is a directory."""
    target = Path(path).expanduser()
    if target.suffix.lower() not in _YAML_SUFFIXES:
        target = target / DEFAULT_FILENAME
    return target.resolve()


def init_config_command(path: str = ".", force: bool = False) -> Path:
    output_path = target_file(path)
    if output_path.exists() and not force:
        raise FileExistsError(f"Config already exists: {output_path} (use --force to overwrite)")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(read_template(), encoding="utf-8")
    console.print(f"[green]Wrote[/green] {escape(str(output_path))}")
    return output_path
