from functools import lru_cache
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from pydantic import AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _ensure_sqlalchemy_postgres_scheme(value: str) -> str:
    if not value.lower().startswith("postgres"):
        return value

    parsed = urlparse(value)
    scheme = parsed.scheme.lower()

    if scheme == "postgres":
        scheme = "postgresql"

    if scheme == "postgresql":
        scheme = "postgresql+psycopg"

    if scheme not in {"postgresql+psycopg", "postgresql+asyncpg"}:
        scheme = "postgresql+psycopg"

    query_params = dict(parse_qsl(parsed.query, keep_blank_values=True))
    # The query core never writes, so prefer any replica the pooler offers.
    query_params.setdefault("target_session_attrs", "any")
    new_query = urlencode(query_params, doseq=True)

    return urlunparse(parsed._replace(scheme=scheme, query=new_query))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Echo emitted SQL statements")
    database_url: AnyUrl | str = Field(
        default="sqlite:///./data/indexer.db",
        description="SQLAlchemy compatible database URL of the indexer store",
    )
    pool_size: int = Field(
        default=5,
        description="Number of pooled connections kept open for batch execution",
        ge=1,
    )
    max_overflow: int = Field(
        default=10,
        description="Connections allowed beyond pool_size under load",
        ge=0,
    )
    pool_timeout_seconds: float = Field(
        default=30.0,
        description="Seconds a batch waits for a pooled connection before failing",
        gt=0,
    )
    pool_recycle_seconds: int = Field(
        default=300,
        description="Recycle pooled connections older than this many seconds",
        ge=-1,
    )
    twitter_api_base_url: AnyUrl | str = Field(
        default="https://api.twitter.com",
        description="Base URL of the Twitter API used for profile decoration",
    )
    twitter_bearer_token: str | None = Field(
        default=None,
        description="Bearer token for the Twitter API; profile lookups are skipped when unset",
    )
    twitter_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to Twitter API requests",
        gt=0,
    )
    twitter_batch_size: int = Field(
        default=100,
        description="Maximum number of handles sent in one Twitter API request",
        ge=1,
        le=100,
    )
    default_page_size: int = Field(
        default=25,
        description="Page size used when a filter specification omits a limit",
        ge=1,
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def _normalize_postgres_urls(cls, value: Any) -> Any:
        if value is None or not isinstance(value, str):
            return value

        if value.startswith("postgres://"):
            return "postgresql://" + value[len("postgres://") :]
        return value

    @field_validator("twitter_bearer_token", mode="before")
    @classmethod
    def _blank_token_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def resolved_database_url(self) -> str:
        return _ensure_sqlalchemy_postgres_scheme(str(self.database_url))


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
