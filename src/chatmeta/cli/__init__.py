"""Command-line interface for chatmeta."""

from chatmeta.cli.app import app

__all__ = ["app"]
