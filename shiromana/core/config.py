"""Application configuration stored as JSON in the user's config directory."""
from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError


logger = logging.getLogger(__name__)

APP_NAME = "shiromana-cli"
CONFIG_ENV_VAR = "SHIROMANA_CONFIG"
LIBRARY_SUFFIX = ".mlib"


def default_library_path() -> Path:
    """Pictures directory of the user, or home when there is none."""
    pictures = Path.home() / "Pictures"
    return pictures if pictures.is_dir() else Path.home()


def default_config_path() -> Path:
    """Location of the config file.

    ``SHIROMANA_CONFIG`` wins, then ``$XDG_CONFIG_HOME``, then ``~/.config``.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base).expanduser() / APP_NAME / "config.json"


class AppConfig(BaseModel):
    """Which library the CLI operates on."""
    version: int = Field(default=1, description="Config format version")
    library_path: Path = Field(
        default_factory=default_library_path,
        description="Directory containing the library",
    )
    library_name: str = Field(
        default="shiro-lib",
        description="Library name; stored as <name>.mlib",
    )

    @field_validator("library_path")
    @classmethod
    def expand_path(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @field_validator("library_name")
    @classmethod
    def check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Library name must not be empty")
        if "/" in value or "\\" in value:
            raise ValueError("Library name must not contain path separators")
        return value

    @property
    def library_dir(self) -> Path:
        return self.library_path / f"{self.library_name}{LIBRARY_SUFFIX}"


def load_config(path: Path) -> AppConfig:
    """Read and validate a config file.

    Raises:
        ConfigError: If the file is unreadable or invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot load configuration file at {path} due to {e}.") from e
    try:
        config = AppConfig.model_validate_json(text)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration file at {path}: {e}") from e
    logger.debug("Loaded config from %s", path)
    return config


def store_config(config: AppConfig, path: Path) -> None:
    """Write a config file, creating its directory."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot store configuration file at {path} due to {e}.") from e
    logger.debug("Stored config at %s", path)
