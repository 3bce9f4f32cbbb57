"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
StoreBackend = Literal["appwrite", "diskcache"]


def _normalize_path(value: Any) -> Path:
    """Normalize a path-like value (no filesystem side-effects)."""
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class AppwriteConfig(BaseSettings):
    """Appwrite connection settings.

    Env vars: APPWRITE_ENDPOINT, APPWRITE_PROJECT_ID, APPWRITE_API_KEY,
    APPWRITE_DATABASE_ID, APPWRITE_COLLECTION_ID, APPWRITE_CLICKS_COLLECTION_ID.
    """

    endpoint: str = Field(
        default="https://cloud.appwrite.io/v1",
        description="Appwrite API endpoint.",
    )
    project_id: str | None = Field(default=None, description="Appwrite project ID.")
    api_key: str | None = Field(
        default=None,
        description="Server API key (never exposed to clients).",
    )
    database_id: str | None = Field(default=None, description="Database ID.")
    collection_id: str | None = Field(
        default=None,
        description="Collection holding search-term counters.",
    )
    clicks_collection_id: str | None = Field(
        default=None,
        description="Collection holding movie click counters. "
        "Falls back to collection_id when unset.",
    )
    atomic_increment: bool = Field(
        default=True,
        description="Use the attribute increment endpoint for counts "
        "(requires Appwrite >= 1.7).",
    )

    model_config = SettingsConfigDict(
        env_prefix="APPWRITE_",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def clicks_collection(self) -> str | None:
        return self.clicks_collection_id or self.collection_id

    def missing_settings(self) -> list[str]:
        """Names of required connection settings that are not set."""
        required = {
            "endpoint": self.endpoint,
            "project_id": self.project_id,
            "api_key": self.api_key,
            "database_id": self.database_id,
            "collection_id": self.collection_id,
        }
        return [name for name, value in required.items() if not value]


class StoreConfig(BaseModel):
    """Counter store backend selection."""

    backend: StoreBackend = Field(
        default="appwrite",
        description="'appwrite' (remote) or 'diskcache' (local SQLite).",
    )
    directory: Path = Field(
        default=Path("./.data/cinetrend"),
        description="Diskcache SQLite path (only when backend=diskcache).",
    )
    search_collection: str = Field(
        default="search_counts",
        description="Search counter collection name (diskcache backend).",
    )
    clicks_collection: str = Field(
        default="movie_clicks",
        description="Click counter collection name (diskcache backend).",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max parallel disk ops (diskcache backend).",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_directory(cls, v: Any) -> Path:
        return _normalize_path(v)


class TrendingConfig(BaseModel):
    """Ranking and poster handling."""

    limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Default size of the trending ranking.",
    )
    poster_base_url: str = Field(
        default="https://image.tmdb.org/t/p/w500",
        description="Prefix for TMDB poster paths.",
    )
    no_image_poster: str = Field(
        default="/no-movie.png",
        min_length=1,
        description="Local sentinel stored when an event carries no poster.",
    )
    placeholder_markers: list[str] = Field(
        default=["placeholder.com", "No+Image"],
        description="Substrings identifying third-party placeholder posters.",
    )

    @field_validator("placeholder_markers")
    @classmethod
    def _validate_markers(cls, v: list[str]) -> list[str]:
        # An empty marker is a substring of every URL.
        if any(not marker for marker in v):
            raise ValueError("placeholder_markers must not contain empty strings")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/store/appwrite/trending).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    app_name: str = Field(default="cinetrend", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Timeout for counter store requests.",
    )
    http_user_agent: str = Field(
        default="cinetrend/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    store: StoreConfig = Field(default_factory=StoreConfig)
    appwrite: AppwriteConfig = Field(default_factory=AppwriteConfig)
    trending: TrendingConfig = Field(default_factory=TrendingConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Dump configuration in the sectioned config.yaml shape, secrets masked."""
        appwrite = self.appwrite.model_dump()
        if appwrite.get("api_key"):
            appwrite["api_key"] = "***"
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "store": self.store.model_dump(mode="json"),
            "appwrite": appwrite,
            "trending": self.trending.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Supported env var examples (flat, explicit):
    - CINETREND_ENVIRONMENT
    - CINETREND_LOG_LEVEL
    - CINETREND_STORE_BACKEND
    - CINETREND_TRENDING_LIMIT
    """

    model_config = SettingsConfigDict(
        env_prefix="CINETREND_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    store_backend: Optional[StoreBackend] = None
    store_dir: Optional[Path] = None

    trending_limit: Optional[int] = None

    @field_validator("store_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """Return only values that were actually provided (non-None), for merging."""
        return self.model_dump(exclude_none=True)
