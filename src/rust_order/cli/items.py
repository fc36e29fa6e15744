from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rust_order.core.engine import reorder_source
from rust_order.core.errors import RustOrderError
from rust_order.core.rewrite import read_source
from rust_order.models import ItemUnit

console = Console()


def _render_units(title: str, units: tuple[ItemUnit, ...]) -> None:
    table = Table(title=title, show_lines=False)
    for header in ("index", "category", "start", "end", "head"):
        table.add_column(header)
    for unit in units:
        table.add_row(str(unit.index), unit.category.value, str(unit.start), str(unit.end), escape(" ".join(unit.head)))
    console.print(table)


def items(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="Rust file to inspect.")],
) -> None:
    """Show how a file splits into items and where each item lands."""
    try:
        result = reorder_source(read_source(path), path=str(path))
    except RustOrderError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]", soft_wrap=True)
        raise typer.Exit(1) from exc

    preamble = result.preamble
    if preamble.shebang is not None:
        console.print(f"shebang: {escape(preamble.shebang)}", soft_wrap=True)
    console.print(f"preamble: {len(preamble.text)} chars, {len(preamble.inner_attributes)} inner attribute(s)")

    original = tuple(sorted(result.units, key=lambda unit: unit.index))
    _render_units("Original order", original)
    _render_units("Canonical order", result.units)
    console.print("[green]already canonical[/green]" if not result.changed else "[yellow]would reorder[/yellow]")
