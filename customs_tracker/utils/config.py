"""
Configuration for Customs Process Tracker

Settings are resolved from built-in defaults, then an optional YAML file, then
environment variables prefixed with ``CUSTOMS_TRACKER_``, then explicit
overrides (CLI options).
"""

from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Tuple, Type, Union

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    YamlConfigSettingsSource
)

from ..core.exceptions import ConfigurationError

ENV_PREFIX = "CUSTOMS_TRACKER_"


class TrackerSettings(BaseSettings):
    """Runtime settings for the API server, CLI and data store."""

    # Database
    database_url: str = "postgresql://localhost/customs_tracker"
    pool_size: int = Field(default=10, ge=1)
    max_overflow: int = Field(default=20, ge=0)
    command_timeout: float = Field(default=60.0, gt=0)

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3001, ge=1, le=65535)
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )

    # Identity provider
    auth_url: Optional[str] = None
    auth_service_key: Optional[str] = None
    auth_timeout: float = Field(default=10.0, gt=0)

    # Assistant
    nlp_service_url: Optional[str] = None
    nlp_service_api_key: Optional[str] = None
    nlp_timeout: float = Field(default=10.0, gt=0)

    # Logging
    log_level: str = "INFO"
    structured_logging: bool = True
    log_file: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Explicit overrides, then environment, then the YAML file named by yaml_file
        return (init_settings, env_settings, YamlConfigSettingsSource(settings_cls))

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def assistant_enabled(self) -> bool:
        return bool(self.nlp_service_url and self.nlp_service_api_key)

    def require(self, *keys: str):
        """Raise ConfigurationError if any of the given settings is unset."""
        for key in keys:
            if not getattr(self, key):
                raise ConfigurationError(key, f"missing value (set {ENV_PREFIX}{key.upper()})")


def _check_config_file(config_file: Union[str, Path]) -> Path:
    path = Path(config_file)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError("config_file", f"{path} does not exist")
    except yaml.YAMLError as e:
        raise ConfigurationError("config_file", f"invalid YAML in {path}: {e}")

    if data is not None and not isinstance(data, dict):
        raise ConfigurationError("config_file", f"{path} must contain a mapping")
    return path


def _settings_class(config_file: Optional[Union[str, Path]]) -> Type[TrackerSettings]:
    if not config_file:
        return TrackerSettings

    path = _check_config_file(config_file)

    class FileTrackerSettings(TrackerSettings):
        model_config = SettingsConfigDict(yaml_file=path)

    return FileTrackerSettings


def load_settings(
    config_file: Optional[Union[str, Path]] = None,
    **overrides
) -> TrackerSettings:
    """
    Load tracker settings.

    Args:
        config_file: Optional YAML file with setting values
        **overrides: Explicit values that win over every other source;
            None values are ignored

    Returns:
        Validated TrackerSettings
    """
    settings_cls = _settings_class(config_file)
    values: Dict[str, Any] = {key: value for key, value in overrides.items() if value is not None}

    try:
        return settings_cls(**values)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or "settings"
        raise ConfigurationError(key, first.get("msg", str(e)))
    except SettingsError as e:
        raise ConfigurationError("settings", str(e))
