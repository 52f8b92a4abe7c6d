# bugtracker/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./bugs.db")
    DB_ECHO: bool = False
    APP_NAME: str = "Bug Tracker API"
    APP_DESC: str = "Track, filter and resolve bugs"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | staging | production | test

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # JSON lines instead of console output

    # CORS origins, comma separated ("*" allows all)
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
