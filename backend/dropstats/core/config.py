"""Configuration settings for the dropstats service."""

from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    postgres_db: str = Field(default="dropstats")
    postgres_user: str = Field(default="dropstats")
    postgres_password: str = Field(default="dev_password")
    postgres_host: str = Field(default="postgres")
    postgres_port: int = Field(default=5432)
    database_url_override: Optional[str] = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Full database URL, takes precedence over the postgres_* fields",
    )

    @property
    def database_url(self) -> str:
        """Construct async database URL from components."""
        if self.database_url_override:
            url = self.database_url_override
            # Plain postgres URLs are rewritten to the asyncpg driver
            for prefix in ("postgres://", "postgresql://"):
                if url.startswith(prefix):
                    return "postgresql+asyncpg://" + url[len(prefix) :]
            return url
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    db_pool_recycle_seconds: int = Field(
        default=1800, description="Reconnect pooled connections older than this"
    )

    # Application Configuration
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Steam Web API Configuration
    steam_api_key: str = Field(
        default="",
        description="Steam Web API key used to resolve vanity urls",
    )
    steam_api_base_url: str = Field(default="https://api.steampowered.com")
    steam_api_timeout: float = Field(default=10.0, gt=0)

    # Cache Configuration
    cache_ttl_seconds: float = Field(
        default=15 * 60, gt=0, description="Maximum age of a cached entry"
    )
    cache_idle_seconds: float = Field(
        default=5 * 60, gt=0, description="Maximum time since a cached entry was read"
    )
    player_cache_size: int = Field(
        default=1024, gt=0, description="Resident player stats entries"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix for environment variables
        extra="forbid",
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()


# Create a global settings instance lazily
settings: Settings | None = None


def get_global_settings() -> Settings:
    """Get or create the global settings instance."""
    global settings
    if settings is None:
        settings = get_settings()
    return settings
