import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from rust_order.cli.fmt import fmt
from rust_order.cli.items import items
from rust_order.cli.watch import watch
from rust_order.config import Settings

app = typer.Typer(
    name="rust-order",
    help="Rust Order CLI: put top-level Rust items into canonical section order.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("fmt")(fmt)
app.command("items")(items)
app.command("watch")(watch)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress (INFO level).")] = False,
    log_level: Annotated[
        str | None, typer.Option(help="Log level; defaults to RUST_ORDER_LOG_LEVEL or WARNING.")
    ] = None,
) -> None:
    try:
        settings = Settings.from_env()
        if log_level is not None:
            settings = Settings(jobs=settings.jobs, log_level=log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if verbose and settings.log_level not in ("DEBUG", "INFO"):
        settings = settings.model_copy(update={"log_level": "INFO"})
    _configure_logging(settings.log_level)
    ctx.obj = settings


def main() -> None:
    app()
