"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADMIN_PASSWORD = "admin123"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database (unset means the primary store is treated as unreachable)
    database_url: str | None = None
    db_connect_timeout: float = 5.0
    auto_migrate: bool = True

    # Storage mode: "server" uses the database with in-memory fallback,
    # "local" keeps everything in a JSON document on disk
    storage_mode: Literal["server", "local"] = "server"
    local_store_path: str = "profile-manager.json"

    # Seeded accounts
    admin_username: str = "admin"
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    viewer_username: str | None = "viewer"
    viewer_password: str | None = "viewer123"

    environment: str = "development"
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:5173"

    # Rate limiting
    login_rate_limit: str = "10/15minutes"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins, filtering empty strings."""
        if not self.cors_origins:
            return ["http://localhost:5173"]
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return origins if origins else ["http://localhost:5173"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


def validate_security_settings(config: Settings | None = None) -> None:
    """Ensure the default admin password is never used in production-like environments."""
    config = config or settings
    if config.environment.lower() not in {"production", "prod"}:
        return

    if config.admin_password == DEFAULT_ADMIN_PASSWORD:
        raise RuntimeError(
            "Insecure default admin password is configured for production: ADMIN_PASSWORD. "
            "Set a strong value in the environment before starting the API."
        )
