"""Main CLI application."""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from chatmeta.cli.commands import metadata
from chatmeta.cli.console import error
from chatmeta.config import ConfigError, load_config
from chatmeta.history import MetadataStore
from chatmeta.logging import configure_logging

app = typer.Typer(
    name="chatmeta",
    help="chatmeta - inspect per-conversation read markers and history references",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging",
        ),
    ] = False,
) -> None:
    """Load configuration and set up logging for all commands."""
    try:
        loaded = load_config(config)
    except (FileNotFoundError, ConfigError) as e:
        error(escape(str(e)))
        raise typer.Exit(1) from None

    configure_logging("DEBUG" if verbose else loaded.log_level, use_rich=True)
    ctx.obj = {"config": loaded, "store": MetadataStore.from_config(loaded)}


metadata.register(app)
