from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase, normalize_api_prefix

SQLITE_FALLBACK_URL = "sqlite+aiosqlite:///./users.db"


class Settings(BaseSettings):
    """
    Application settings loaded from environment.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    # An explicit DATABASE_URL always wins over the POSTGRES_* parts.
    DATABASE_URL_OVERRIDE: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "DATABASE_URL_OVERRIDE"),
    )
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str | None = None
    POSTGRES_PASSWORD: str | None = None
    POSTGRES_HOST: str | None = None
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str | None = None

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False
    DB_CREATE_ALL: bool = True

    # HTTP
    API_PREFIX: str = "/api/users"

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/user-service")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL the engine should connect to.

        Resolution order:
        - `DATABASE_URL` from the environment (read into DATABASE_URL_OVERRIDE).
        - A Postgres URL when host, database, username and password are all set.
        - A local SQLite file, so the service starts without a database server.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        if all((self.POSTGRES_USERNAME, self.POSTGRES_PASSWORD, self.POSTGRES_HOST, self.POSTGRES_DB)):
            return (
                f"postgresql+{self.POSTGRES_DRIVER}://"
                f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
                f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
                f"{self.POSTGRES_DB}"
            )

        return SQLITE_FALLBACK_URL

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase before the Literal check runs,
        so LOG_LEVEL=debug is accepted.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    @field_validator("API_PREFIX", mode="before")
    def normalize_prefix(cls, v: str | None) -> str:
        return normalize_api_prefix(v)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


# get_settings() takes no arguments and always returns the same settings from the environment,
# so caching it with @lru_cache() avoids re-reading the environment on every call.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
