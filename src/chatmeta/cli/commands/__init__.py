"""CLI command modules."""

from chatmeta.cli.commands import metadata

__all__ = ["metadata"]
