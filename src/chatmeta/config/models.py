"""Configuration models using Pydantic."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from chatmeta.config.paths import get_history_path


class ConfigError(Exception):
    """Configuration error."""

    pass


class ChatmetaConfig(BaseModel):
    """Root configuration model."""

    history_dir: Path = Field(default_factory=get_history_path)
    # False = plain overwrite, a crash mid-write can leave a truncated file
    atomic_writes: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
