"""Runtime settings for a measurement run.

Precedence, lowest to highest: built-in defaults, YAML config file,
environment, CLI flags. The resulting Settings object is passed explicitly
to the installer, resolver and pipeline.
"""

from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml

from common.errors import ConfigError
from constants import Constants

logger = logging.getLogger(__name__)

_COMMAND_KEYS = ("npm_command", "bundler_command", "minifier_command")


@dataclass
class Settings:
    """Configuration for one measurement run."""

    cache_dir: str = Constants.MODULE_CACHE_PATH
    npm_command: List[str] = field(default_factory=lambda: list(Constants.NPM_COMMAND))
    bundler_command: List[str] = field(default_factory=lambda: list(Constants.BUNDLER_COMMAND))
    minifier_command: List[str] = field(default_factory=lambda: list(Constants.MINIFIER_COMMAND))
    minifier_args: List[str] = field(default_factory=list)
    gzip_level: Optional[int] = None
    chunk_size: int = Constants.CHUNK_SIZE
    node_env: str = Constants.NODE_ENV

    @property
    def env(self) -> Dict[str, str]:
        """Environment substituted into the bundle."""
        return {"NODE_ENV": self.node_env}

    def apply(self, data: Dict[str, Any]) -> None:
        """Overlay recognized keys from a config mapping."""
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            if value is None:
                continue
            if key in _COMMAND_KEYS or key == "minifier_args":
                value = shlex.split(value) if isinstance(value, str) else [str(v) for v in value]
            elif key in ("gzip_level", "chunk_size"):
                try:
                    value = int(value)
                except (TypeError, ValueError) as e:
                    raise ConfigError(f"Config key {key} must be an integer, got {value!r}") from e
            elif key == "cache_dir":
                value = os.path.abspath(os.path.expanduser(str(value)))
            else:
                value = str(value)
            setattr(self, key, value)
        if self.gzip_level is not None and self.gzip_level not in Constants.GZIP_LEVELS:
            raise ConfigError(f"gzip_level must be between -1 and 9, got {self.gzip_level}")
        if self.chunk_size <= 0:
            raise ConfigError(f"chunk_size must be positive, got {self.chunk_size}")


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML config file; a top-level ``bundlecost`` section is honored.

    Returns an empty mapping when no path is given or the file is missing.

    Raises:
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    if not path:
        return {}
    if not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Unable to load config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{Constants.CONFIG_SECTION}' in {path} must be a mapping")
    return section


def build_settings(args: Any) -> Settings:
    """Build Settings from defaults, config file, environment and CLI args."""
    settings = Settings()

    config_path = getattr(args, "CONFIG", None) or os.environ.get(Constants.ENV_CONFIG)
    config = load_config_file(config_path)
    if config:
        logger.debug("Loaded config from: %s", config_path)
        settings.apply(config)

    env_cache = os.environ.get(Constants.ENV_CACHE_DIR)
    if env_cache:
        settings.apply({"cache_dir": env_cache})

    overrides: Dict[str, Any] = {
        "cache_dir": getattr(args, "CACHE_DIR", None),
        "gzip_level": getattr(args, "GZIP_LEVEL", None),
        "minifier_args": getattr(args, "MINIFIER_ARGS", None) or None,
    }
    settings.apply(overrides)
    return settings
