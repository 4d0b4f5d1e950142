"""Configuration loading."""

import io
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from netspawn.errors import ConfigError
from netspawn.models.config import SpawnConfig


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("/etc/netspawn/config.yaml")
CONFIG_ENV_VAR = "NETSPAWN_CONFIG"


class ConfigManager:
    """Loads the optional YAML configuration file."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager."""
        self.config_path = Path(config_path) if config_path else None
        self.yaml = YAML()
        self.yaml.preserve_quotes = True
        self.config: Optional[SpawnConfig] = None
        self.source: Optional[Path] = None

    def resolve_path(self) -> Optional[Path]:
        """Explicit path, then $NETSPAWN_CONFIG, then the system default if present."""
        if self.config_path:
            return self.config_path

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)

        if DEFAULT_CONFIG_PATH.exists():
            return DEFAULT_CONFIG_PATH
        return None

    def load(self) -> SpawnConfig:
        """Load configuration, falling back to built-in defaults."""
        path = self.resolve_path()
        if path is None:
            logger.debug("No configuration file, using defaults")
            self.config = SpawnConfig()
            return self.config

        if not path.exists():
            raise ConfigError(f"Config not found: {path}")

        data = self._read_yaml(path)
        try:
            self.config = SpawnConfig.model_validate(data)
        except ValidationError as e:
            logger.error(f"Invalid config {path}: {e}")
            raise ConfigError(f"Invalid config {path}: {e}") from e

        self.source = path
        logger.debug(f"Loaded config: {path}")
        return self.config

    def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            data = self.yaml.load(file_path.read_text())
        except YAMLError as e:
            raise ConfigError(f"Cannot parse {file_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{file_path} must contain a mapping at the top level")
        return data

    def dump(self) -> str:
        """Effective configuration as YAML text."""
        config = self.config or self.load()
        stream = io.StringIO()
        self.yaml.dump(config.model_dump(mode="json"), stream)
        return stream.getvalue()
