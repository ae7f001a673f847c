"""Configuration module."""

from chatmeta.config.loader import load_config
from chatmeta.config.models import ChatmetaConfig, ConfigError
from chatmeta.config.paths import (
    get_chatmeta_home,
    get_config_path,
    get_history_path,
    get_logs_path,
)

__all__ = [
    "ChatmetaConfig",
    "ConfigError",
    "get_chatmeta_home",
    "get_config_path",
    "get_history_path",
    "get_logs_path",
    "load_config",
]
