# File: src/slotkeeper/infrastructure/config.py
"""
Application settings

Settings come from an optional YAML file. Lookup order:
1. an explicit path (the --config option)
2. the SLOTKEEPER_CONFIG environment variable
3. slotkeeper.yaml in the working directory
4. built-in defaults

Example slotkeeper.yaml:

    state_file: data/slotkeeper_state.bin
    tariff_file: data/slotkeeper_tariffs.txt
    capacity: 50
    currency_symbol: "$"
    log_level: INFO
    log_file: logs/slotkeeper.log
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging
import os

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..domain.registry import DEFAULT_CAPACITY
from ..exceptions import ConfigurationError


CONFIG_ENV_VAR = "SLOTKEEPER_CONFIG"
DEFAULT_CONFIG_FILE = "slotkeeper.yaml"

logger = logging.getLogger(__name__)


class AppSettings(BaseModel):
    """Runtime configuration"""

    model_config = ConfigDict(extra="forbid", frozen=True)

    state_file: Path = Field(default=Path("slotkeeper_state.bin"), description="Binary state snapshot")
    tariff_file: Path = Field(default=Path("slotkeeper_tariffs.txt"), description="Tariff configuration")
    capacity: int = Field(default=DEFAULT_CAPACITY, ge=1, le=9999, description="Number of parking slots")
    currency_symbol: str = Field(default="$", max_length=5, description="Prefix for amounts")
    log_level: str = Field(default="INFO", description="Root logging level")
    log_file: Optional[Path] = Field(default=Path("logs/slotkeeper.log"), description="Log file, null to disable")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = str(v).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def resolve(self, base_dir: Path) -> 'AppSettings':
        """Anchor relative file paths at base_dir"""
        updates: Dict[str, Any] = {}
        for name in ("state_file", "tariff_file", "log_file"):
            value = getattr(self, name)
            if value is not None and not value.is_absolute():
                updates[name] = base_dir / value
        return self.model_copy(update=updates)


def find_config_file(explicit: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Pick the settings file to use, or None for defaults"""
    if explicit:
        return Path(explicit)
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    default = Path(DEFAULT_CONFIG_FILE)
    if default.is_file():
        return default
    return None


def load_settings(path: Optional[Union[str, Path]] = None) -> AppSettings:
    """
    Load settings from YAML
    Relative paths inside the file are taken relative to the file itself
    Raises: ConfigurationError for unreadable or invalid files
    """
    config_path = find_config_file(path)
    if config_path is None:
        return AppSettings()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read settings file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Settings file {config_path} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {config_path} must contain a mapping")

    try:
        settings = AppSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {config_path}: {e}") from e

    logger.debug(f"Loaded settings from {config_path}")
    return settings.resolve(config_path.resolve().parent)
