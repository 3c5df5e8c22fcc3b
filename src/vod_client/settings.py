"""
Settings Management Module

Provides pydantic-based configuration management with:
- YAML configuration file loading
- Environment variable overrides (VOD_*)
- Multi-environment support (development, production, test)
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import VodConfigError


class RaceSettings(BaseModel):
    """Origin race configuration."""

    deadline: float = 10.0
    check_timeout: float = 5.0
    cache_ttl: float = 300.0
    cache_max_entries: int = 10


class RecoverySettings(BaseModel):
    """Playback fault recovery configuration."""

    max_retries: int = 3
    backoff_base: float = 1.0


class HttpSettings(BaseModel):
    """HTTP client configuration settings."""

    timeout: float = 10.0
    max_connections: int = 50
    max_keepalive_connections: int = 20
    keepalive_expiry: float = 5.0
    follow_redirects: bool = True
    verify_ssl: bool = True

    default_headers: dict[str, str] = Field(
        default_factory=lambda: {
            "User-Agent": (
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
            ),
            "Accept": "*/*",
        }
    )


class AdFilterSettings(BaseModel):
    """Manifest ad filtering configuration."""

    enabled: bool = True
    extra_patterns: list[str] = Field(default_factory=list)


class LoggingSettings(BaseModel):
    """structlog configuration."""

    level: str = "INFO"
    json_output: bool = False


class Settings(BaseSettings):
    """
    Main application settings with multi-environment support.

    Configuration hierarchy (lowest to highest precedence):
    1. settings/config.yaml (base)
    2. settings/config.{environment}.yaml (environment-specific)
    3. Environment variables (VOD_*, nested with "__")

    Examples:
        >>> settings = get_settings()
        >>> settings.race.deadline
        10.0

        Override from the environment:
        $ VOD_RACE__DEADLINE=6 python -m my_app
    """

    model_config = SettingsConfigDict(
        env_prefix="VOD_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="allow",
    )

    environment: str = "development"
    debug: bool = False

    race: RaceSettings = Field(default_factory=RaceSettings)
    recovery: RecoverySettings = Field(default_factory=RecoverySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    ad_filter: AdFilterSettings = Field(default_factory=AdFilterSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    origins: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML values arrive as init kwargs; environment variables must win
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def load_from_yaml(cls, config_path: Path | None = None) -> "Settings":
        """
        Load settings from YAML configuration file.

        Args:
            config_path: Path to config file (default: settings/config.yaml)

        Returns:
            Settings instance

        Raises:
            VodConfigError: If a configuration file is not valid YAML
        """
        if config_path is None:
            # settings.py is in src/vod_client/, the project root is three levels up
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "settings" / "config.yaml"

        if not config_path.exists():
            return cls()

        config_data = cls._read_yaml(config_path)

        env = os.getenv("VOD_ENVIRONMENT", config_data.get("environment", "development"))
        env_config_path = config_path.parent / f"config.{env}.yaml"

        if env_config_path.exists():
            config_data = cls._deep_merge(config_data, cls._read_yaml(env_config_path))

        return cls(**config_data)

    @staticmethod
    def _read_yaml(path: Path) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise VodConfigError(
                f"Invalid YAML in {path.name}", context={"error": str(e)}
            ) from e
        if not isinstance(data, dict):
            raise VodConfigError(f"Top level of {path.name} must be a mapping")
        return data

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = Settings._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


@lru_cache
def get_settings(config_path: Path | None = None) -> Settings:
    """
    Get cached settings instance.

    Args:
        config_path: Optional path to config file

    Returns:
        Settings instance
    """
    return Settings.load_from_yaml(config_path)


def reload_settings() -> Settings:
    """Reload settings by clearing cache."""
    get_settings.cache_clear()
    return get_settings()


__all__ = [
    "Settings",
    "RaceSettings",
    "RecoverySettings",
    "HttpSettings",
    "AdFilterSettings",
    "LoggingSettings",
    "get_settings",
    "reload_settings",
]
