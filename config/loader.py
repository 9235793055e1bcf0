"""
Configuration loader.

Loads configuration from:
1. Default values (built-in)
2. TOML config file (oppscore.toml or ~/.config/oppscore/config.toml)
3. Environment variables

Priority: env vars > config file > defaults
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .schema import OppscoreConfig

logger = logging.getLogger(__name__)

# Config file search paths (in priority order)
CONFIG_PATHS = [
    Path("oppscore.toml"),                                 # Current directory
    Path(".oppscore.toml"),                                # Hidden in current directory
    Path.home() / ".config" / "oppscore" / "config.toml",  # User config
    Path("/etc/oppscore/config.toml"),                     # System config
]

# Environment variable prefix
ENV_PREFIX = "OPPSCORE_"


class ConfigError(Exception):
    """Configuration error with helpful message."""

    def __init__(self, message: str, source: str | None = None, field: str | None = None):
        self.source = source
        self.field = field
        super().__init__(message)

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.source:
            parts.append(f"Source: {self.source}")
        if self.field:
            parts.append(f"Field: {self.field}")
        return " | ".join(parts)


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load TOML file if it exists."""
    if not path.exists():
        return {}

    try:
        import tomllib
    except ImportError:
        # Python < 3.11 fallback
        import tomli as tomllib

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        logger.info(f"Loaded config from: {path}")
        return data
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML: {e}", source=str(path))


def _find_config_file() -> Path | None:
    """Find the first existing config file."""
    if env_path := os.environ.get(f"{ENV_PREFIX}CONFIG"):
        return Path(env_path)
    for path in CONFIG_PATHS:
        if path.exists():
            return path
    return None


def _load_env_overrides() -> dict[str, Any]:
    """Collect overrides from environment variables."""
    overrides: dict[str, Any] = {}

    if level := os.environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
        overrides["logging"] = {"level": level}

    if workers := os.environ.get(f"{ENV_PREFIX}MAX_WORKERS"):
        try:
            overrides["batch"] = {"max_workers": int(workers)}
        except ValueError:
            raise ConfigError(
                f"{ENV_PREFIX}MAX_WORKERS must be an integer, got {workers!r}",
                source="environment",
                field="batch.max_workers",
            )

    if version := os.environ.get(f"{ENV_PREFIX}SECTOR_TABLES_VERSION"):
        overrides["sector_tables"] = {"version": version}

    return overrides


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Path | str | None = None) -> OppscoreConfig:
    """
    Load and validate configuration.

    Args:
        config_path: Explicit path to config file (optional)

    Returns:
        Validated OppscoreConfig

    Raises:
        ConfigError: If configuration is invalid
    """
    config_data: dict[str, Any] = {}

    # Load from config file
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", source=str(path))
        config_data = _load_toml_file(path)
    else:
        found_path = _find_config_file()
        if found_path:
            config_data = _load_toml_file(found_path)

    env_overrides = _load_env_overrides()
    if env_overrides:
        config_data = _deep_merge(config_data, env_overrides)
        logger.debug(f"Applied {len(env_overrides)} override section(s) from environment")

    # Validate and create config
    try:
        config = OppscoreConfig(**config_data)
    except ValidationError as e:
        errors = e.errors()
        if errors:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get("loc", []))
            msg = first_error.get("msg", "Validation error")
            raise ConfigError(f"Invalid configuration: {msg}", field=field)
        raise ConfigError(f"Invalid configuration: {e}")

    return config


@lru_cache
def get_config(config_path: Path | str | None = None) -> OppscoreConfig:
    """
    Get the process-wide configuration.

    Loaded once per config path; the CLI resolves its configuration here.
    """
    return load_config(config_path)


def reload_config(config_path: Path | str | None = None) -> OppscoreConfig:
    """
    Force reload configuration.

    Clears the cache and reloads from file/environment.
    """
    get_config.cache_clear()
    return get_config(config_path)
