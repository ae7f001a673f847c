"""Metadata inspection commands."""

import asyncio
import logging
from typing import Annotated

import typer
from rich.markup import escape

from chatmeta.cli.console import console, create_table, dim, error, success
from chatmeta.history import HistoryError, Kind, MetadataStore, ReadMarker, parse_kind
from chatmeta.timestamps import format_millis, format_rfc3339

logger = logging.getLogger(__name__)

SCOPE_HELP = (
    "Conversation scope: server:<id>, channel:<server>:<channel>, "
    "query:<server>:<nick>, logs or highlights"
)


def _parse_scope(value: str) -> Kind:
    try:
        return parse_kind(value)
    except ValueError as e:
        error(escape(str(e)))
        raise typer.Exit(1) from None


def _get_store(ctx: typer.Context) -> MetadataStore:
    return ctx.obj["store"]


async def _show(store: MetadataStore, kind: Kind) -> None:
    metadata, outcome = await store.load_with_outcome(kind)
    path = await store.path(kind)

    table = create_table(escape(str(kind)), [("Field", "cyan"), ("Value", "")])
    table.add_row("file", escape(str(path)))
    table.add_row("status", outcome.value)
    table.add_row(
        "read_marker",
        str(metadata.read_marker) if metadata.read_marker else "-",
    )
    table.add_row(
        "last_triggers_unread",
        format_millis(metadata.last_triggers_unread)
        if metadata.last_triggers_unread
        else "-",
    )
    references = metadata.chathistory_references
    if references:
        table.add_row("references.timestamp", format_rfc3339(references.timestamp))
        table.add_row("references.id", escape(references.id or "-"))
    else:
        table.add_row("references", "-")
    console.print(table)


def register(app: typer.Typer) -> None:
    """Register the metadata commands."""

    @app.command()
    def show(
        ctx: typer.Context,
        scope: Annotated[str, typer.Argument(help=SCOPE_HELP)],
    ) -> None:
        """Show the stored metadata for a conversation."""
        kind = _parse_scope(scope)
        try:
            asyncio.run(_show(_get_store(ctx), kind))
        except HistoryError as e:
            error(escape(str(e)))
            raise typer.Exit(1) from None

    @app.command()
    def path(
        ctx: typer.Context,
        scope: Annotated[str, typer.Argument(help=SCOPE_HELP)],
    ) -> None:
        """Print the metadata file path for a conversation."""
        kind = _parse_scope(scope)
        try:
            resolved = asyncio.run(_get_store(ctx).path(kind))
        except HistoryError as e:
            error(escape(str(e)))
            raise typer.Exit(1) from None
        console.print(escape(str(resolved)), soft_wrap=True)

    @app.command()
    def mark(
        ctx: typer.Context,
        scope: Annotated[str, typer.Argument(help=SCOPE_HELP)],
        timestamp: Annotated[
            str,
            typer.Argument(help="RFC3339 timestamp, e.g. 2024-05-01T12:30:45.123Z"),
        ],
    ) -> None:
        """Advance the read marker of a conversation."""
        kind = _parse_scope(scope)
        try:
            read_marker = ReadMarker.parse(timestamp)
        except ValueError:
            error(f"Invalid timestamp: {escape(timestamp)}")
            raise typer.Exit(1) from None

        try:
            advanced = asyncio.run(_get_store(ctx).update(kind, read_marker))
        except HistoryError as e:
            error(escape(str(e)))
            raise typer.Exit(1) from None

        if advanced:
            logger.info("read_marker_advanced", extra={"history.kind": str(kind)})
            success(f"Read marker set to {read_marker}")
        else:
            dim("Stored read marker is already at or past that time")
