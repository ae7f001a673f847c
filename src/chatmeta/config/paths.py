"""Centralized path management for chatmeta.

All state (config, history metadata, logs) is stored under a single base
directory. The base directory can be overridden with the CHATMETA_HOME
environment variable.

Default locations:
- Linux/macOS: ~/.chatmeta
- Windows: %USERPROFILE%\\.chatmeta
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "CHATMETA_HOME"


@lru_cache(maxsize=1)
def get_chatmeta_home() -> Path:
    """Get the base directory for all chatmeta data.

    Resolution order:
    1. CHATMETA_HOME environment variable (if set)
    2. Platform default (~/.chatmeta)

    Returns:
        Path to the chatmeta home directory.
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".chatmeta"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_chatmeta_home() / "config.toml"


def get_history_path() -> Path:
    """Get the history directory path.

    Holds one metadata file per conversation scope, named by the hash of
    the scope's composite key.
    """
    return get_chatmeta_home() / "history"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_chatmeta_home() / "logs"


def get_all_paths() -> dict[str, Path]:
    """Get all standard paths for debugging/display."""
    return {
        "home": get_chatmeta_home(),
        "config": get_config_path(),
        "history": get_history_path(),
        "logs": get_logs_path(),
    }
