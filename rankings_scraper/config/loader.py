"""
YAML configuration loader with validation.

Loads settings from YAML files with:
- Environment variable substitution
- Schema validation
- Default values
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
import structlog

from rankings_scraper.navigators.base import ListingSource

logger = structlog.get_logger(__name__)

DEFAULT_SETTINGS_FILE = "settings.yml"


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, empty string (with warning) if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


@dataclass
class HttpSettings:
    timeout: float = 30.0
    max_retries: int = 3
    user_agent: Optional[str] = None


@dataclass
class CacheSettings:
    year_ttl: float = 24 * 60 * 60  # Per-year scrape results
    dataset_ttl: float = 60  # Persisted payload read from disk


@dataclass
class StorageSettings:
    data_file: str = "church-data.json"


@dataclass
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 3001


@dataclass
class Settings:
    """Complete application settings."""

    source: ListingSource = field(default_factory=ListingSource)
    http: HttpSettings = field(default_factory=HttpSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    server: ServerSettings = field(default_factory=ServerSettings)


class ConfigLoader:
    """
    Configuration loader for application settings.

    Loads YAML config files and validates against expected schema.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        content = substitute_env_vars(content)
        config = yaml.safe_load(content)

        return config or {}

    def load_settings(self, filename: str = DEFAULT_SETTINGS_FILE) -> Settings:
        """
        Load settings from YAML.

        Args:
            filename: Settings file name

        Returns:
            Settings object

        Raises:
            ValueError: If a section is malformed
        """
        return parse_settings(self.load_file(filename))


def parse_settings(data: dict) -> Settings:
    """
    Parse a settings document into Settings.

    Missing sections and keys fall back to defaults.

    Raises:
        ValueError: If a section is not a mapping or a value is invalid
    """
    sections = {}
    for name in ("source", "http", "cache", "storage", "server"):
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ValueError(f"Config section '{name}' must be a mapping")
        sections[name] = section

    http = sections["http"]
    cache = sections["cache"]
    storage = sections["storage"]
    server = sections["server"]

    try:
        settings = Settings(
            source=ListingSource.from_dict(sections["source"]),
            http=HttpSettings(
                timeout=float(http.get("timeout", HttpSettings.timeout)),
                max_retries=int(http.get("max_retries", HttpSettings.max_retries)),
                user_agent=http.get("user_agent") or None,
            ),
            cache=CacheSettings(
                year_ttl=float(cache.get("year_ttl", CacheSettings.year_ttl)),
                dataset_ttl=float(cache.get("dataset_ttl", CacheSettings.dataset_ttl)),
            ),
            storage=StorageSettings(
                data_file=str(storage.get("data_file") or StorageSettings.data_file),
            ),
            server=ServerSettings(
                host=str(server.get("host") or ServerSettings.host),
                port=int(server.get("port") or ServerSettings.port),
            ),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid settings: {e}") from e

    logger.debug(
        "settings_loaded",
        years=settings.source.years,
        data_file=settings.storage.data_file,
    )
    return settings


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Convenience function to load settings.

    Args:
        config_path: Optional path to a settings YAML file

    Returns:
        Settings object
    """
    if config_path:
        config_dir = str(Path(config_path).parent)
        filename = Path(config_path).name
        loader = ConfigLoader(config_dir)
        return loader.load_settings(filename)
    else:
        loader = ConfigLoader()
        return loader.load_settings()
