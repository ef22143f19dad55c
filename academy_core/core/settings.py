"""Application settings and configuration."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="dev", alias="ENV")
    timezone: str = Field(default="Europe/Paris", alias="TZ")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database
    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")
    postgres_db: str = Field(default="academy", alias="POSTGRES_DB")
    postgres_user: str = Field(default="academy", alias="POSTGRES_USER")
    postgres_password: str = Field(default="academy", alias="POSTGRES_PASSWORD")
    # Full URL override, e.g. sqlite+aiosqlite:///./academy.db for local runs
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")

    # Security (tokens are issued by the identity service)
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=4320, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    # Scheduling
    default_session_minutes: int = Field(default=90, alias="DEFAULT_SESSION_MINUTES")
    slot_width_minutes: int = Field(default=30, alias="SLOT_WIDTH_MINUTES")
    slot_day_start: str = Field(default="08:00", alias="SLOT_DAY_START")
    slot_day_end: str = Field(default="17:00", alias="SLOT_DAY_END")

    # Enrollment
    max_active_enrollments: int = Field(default=3, alias="MAX_ACTIVE_ENROLLMENTS")

    @property
    def database_url(self) -> str:
        """Get async database URL."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
