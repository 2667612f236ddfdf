"""
Application settings.

Values come from environment variables (or a local .env file) so the same
code runs against SQLite on a laptop and PostgreSQL in production.
"""
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = Field(default="ComUniMo")

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./comunimo.db")
    DB_ECHO: bool = Field(default=False)

    # JWT for back-office operators
    SECRET_KEY: str = Field(default="change-me-in-production")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")  # text or json

    # CORS (public registration form + dashboard)
    CORS_ORIGINS: List[str] = Field(default=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ])

    # Attempts before giving up when a concurrent writer grabs the same bib
    BIB_ALLOCATION_MAX_ATTEMPTS: int = Field(default=3, ge=1)


settings = Settings()
