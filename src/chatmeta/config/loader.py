"""Configuration loading from TOML files."""

import tomllib
from pathlib import Path

from pydantic import ValidationError

from chatmeta.config.models import ChatmetaConfig, ConfigError
from chatmeta.config.paths import get_config_path


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("chatmeta.toml"),  # Current directory
        get_config_path(),  # ~/.chatmeta/config.toml (or CHATMETA_HOME)
    ]


def load_config(path: Path | None = None) -> ChatmetaConfig:
    """Load configuration from TOML file.

    Args:
        path: Explicit path to config file. If None, searches default locations
            and falls back to defaults when none exists.

    Returns:
        Validated ChatmetaConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigError: If the config file is invalid.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in _get_default_config_paths():
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    if config_path is None:
        return ChatmetaConfig()

    try:
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    if isinstance(raw_config.get("history_dir"), str):
        raw_config["history_dir"] = Path(raw_config["history_dir"]).expanduser()

    try:
        return ChatmetaConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {config_path}: {e}") from e
