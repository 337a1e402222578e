"""
Application configuration.

Settings are layered, lowest priority first:

1. ``configuration/base.yaml``
2. ``configuration/<environment>.yaml`` (``APP_ENVIRONMENT``, default ``local``)
3. ``APP_``-prefixed environment variables, ``__`` for nesting
   (e.g. ``APP_APPLICATION__PORT=8001``)
4. Keyword arguments passed to ``Settings``
"""

from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from sqlalchemy.engine import URL

from newsletter.core.errors import ConfigurationError
from newsletter.domain.subscriber import parse_subscriber_email


class Environment(str, Enum):
    LOCAL = "local"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: str) -> "Environment":
        try:
            return cls(value.lower())
        except ValueError:
            raise ConfigurationError(
                f"{value} is not a supported environment. Use either 'local' or 'production'."
            ) from None


class ApplicationSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    # Externally reachable URL, embedded in confirmation links.
    base_url: str = "http://127.0.0.1:8000"


class DatabaseSettings(BaseModel):
    username: str = "postgres"
    password: SecretStr = SecretStr("password")
    host: str = "localhost"
    port: int = 5432
    database_name: str = "newsletter"
    require_ssl: bool = False
    driver: str = "postgresql+asyncpg"

    def connection_url(self) -> URL:
        return self._url(self.database_name)

    def connection_url_without_db(self) -> URL:
        """URL of the maintenance database, used to create fresh databases."""
        return self._url("postgres")

    def _url(self, database: str) -> URL:
        query = {"ssl": "require"} if self.require_ssl else {}
        return URL.create(
            self.driver,
            username=self.username,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=database,
            query=query,
        )


class EmailClientSettings(BaseModel):
    base_url: str = "http://localhost:8025"
    sender_email: str = "newsletter@example.com"
    authorization_token: SecretStr = SecretStr("")
    timeout_milliseconds: int = 10_000

    def sender(self) -> str:
        return parse_subscriber_email(self.sender_email)

    def timeout(self) -> float:
        return self.timeout_milliseconds / 1000


class LoggingSettings(BaseModel):
    level: str = "info"
    format: Literal["json", "text"] = "json"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def configuration_dir() -> Path:
    return Path(os.environ.get("APP_CONFIGURATION_DIR", Path.cwd() / "configuration"))


def load_yaml_layers(config_dir: Path, environment: Environment) -> dict[str, Any]:
    """Read ``base.yaml`` then ``<environment>.yaml``. Both files must exist."""
    merged: dict[str, Any] = {}
    for name in ("base.yaml", f"{environment.value}.yaml"):
        path = config_dir / name
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Failed to parse {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigurationError(f"{path} must contain a mapping at the top level")
        merged = _deep_merge(merged, raw)
    merged["environment"] = environment.value
    return merged


class Settings(BaseSettings):
    """Newsletter service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Environment = Environment.LOCAL
    application: ApplicationSettings = Field(default_factory=ApplicationSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    # Full SQLAlchemy URL; overrides ``database`` when set.
    database_url: Optional[str] = None
    email_client: EmailClientSettings = Field(default_factory=EmailClientSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        environment = Environment.parse(os.environ.get("APP_ENVIRONMENT", "local"))
        yaml_settings = InitSettingsSource(
            settings_cls, load_yaml_layers(configuration_dir(), environment)
        )
        return init_settings, env_settings, yaml_settings

    def sqlalchemy_url(self) -> str | URL:
        return self.database_url or self.database.connection_url()


def get_configuration(**overrides: Any) -> Settings:
    """Load settings, raising ``ConfigurationError`` on any failure."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


@lru_cache
def get_settings() -> Settings:
    return get_configuration()
