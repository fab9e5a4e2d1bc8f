"""Environment-based configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from sqlalchemy.engine import URL


def int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def database_configured() -> bool:
    """True when the environment points at a real database server."""

    if os.getenv("DATABASE_URL"):
        return True
    # Same variables resolve_database_url needs to build a Postgres URL.
    return all(os.getenv(name) for name in ("PGHOST", "PGUSER", "PGDATABASE"))


def resolve_database_url() -> str:
    """Resolve DB connection string.

    Priority:
      1) DATABASE_URL (explicit)
      2) Build from PG* env vars (common Postgres convention)
      3) Fallback to local sqlite
    """

    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return explicit

    host = os.getenv("PGHOST")
    user = os.getenv("PGUSER")
    database = os.getenv("PGDATABASE")

    if host and user and database:
        password = os.getenv("PGPASSWORD")
        sslmode = os.getenv("PGSSLMODE", "prefer")

        query = {"sslmode": sslmode} if sslmode else {}
        url = URL.create(
            drivername="postgresql+psycopg2",
            username=user,
            password=password,
            host=host,
            port=int_env("PGPORT", 5432),
            database=database,
            query=query,
        )
        return url.render_as_string(hide_password=False)

    return "sqlite:///./inventory.db"


def resolve_storage_backend() -> str:
    explicit = os.getenv("STORAGE_BACKEND")
    if explicit:
        return explicit.lower().strip()
    return "sql" if database_configured() else "file"


@dataclass(frozen=True)
class BaseConfig:
    """Base configuration shared by all environments."""

    APP_ENV: str = os.getenv("APP_ENV", "development")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int_env("PORT", 3000)

    # Photo files
    CACHE_DIR: str = os.getenv("CACHE_PATH", "cache")
    MAX_CONTENT_LENGTH: int = int_env("MAX_UPLOAD_BYTES", 16 * 1024 * 1024)

    STORAGE_BACKEND: str = resolve_storage_backend()  # "file" | "sql"

    # File backend
    DATA_FILE: str = os.getenv("DATA_FILE", "data/items.json")

    # SQL backend
    DATABASE_URL: str = resolve_database_url()
    DB_POOL_SIZE: int = int_env("DB_POOL_SIZE", 10)
    DB_CONNECT_RETRIES: int = int_env("DB_CONNECT_RETRIES", 5)
    DB_CONNECT_RETRY_DELAY: float = float_env("DB_CONNECT_RETRY_DELAY", 5.0)

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    """Development configuration."""

    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    """Production configuration."""

    DEBUG: bool = False


def get_config() -> type[BaseConfig]:
    """Resolve configuration class based on APP_ENV."""

    env = os.getenv("APP_ENV", "development").lower().strip()
    if env == "production":
        return ProductionConfig
    return DevelopmentConfig
