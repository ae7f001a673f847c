"""Centralized logging configuration for chatmeta.

All entry points (CLI, embedding applications) should call
configure_logging() early.

Logging Levels:
- DEBUG: Metadata file absent, no-op updates, resolved paths
- INFO: Read markers written from the CLI
- WARNING: Corrupt or unreadable metadata files mapped to defaults
- ERROR: Failures that affect operation
"""

import logging
import os

LEVEL_ENV_VAR = "CHATMETA_LOG_LEVEL"


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    Converts full module paths to short component names:
    - chatmeta.history.metadata -> history
    - chatmeta.cli.commands.metadata -> cli
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "chatmeta":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)


def configure_logging(
    level: str | None = None,
    use_rich: bool = False,
) -> None:
    """Configure logging for chatmeta.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses CHATMETA_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful output.
    """
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "INFO")
    level = level.upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        level = "INFO"

    log_level = getattr(logging, level)

    console_handler: logging.Handler
    if use_rich:
        from rich.logging import RichHandler

        console_handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        console_handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )

    logging.basicConfig(
        level=log_level,
        handlers=[console_handler],
        force=True,
    )
