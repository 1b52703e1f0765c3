# velohub/core/config.py
# - Reads env vars from ".env" if available (pydantic-settings).
# - Every knob has a development default so the API boots without a .env file.

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./velohub.db"

    # HS256 secret shared with the auth provider that issues bearer tokens
    SECRET_KEY: str = "CHANGE_THIS_TO_RANDOM_SECRET"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    FRONTEND_URL: str | None = None
    LOG_LEVEL: str = "INFO"

    # DEV ONLY: create tables on startup instead of running Alembic
    RUN_CREATE_ALL: bool = False

    # reporting / checkout
    STOCK_ATTENTION_DAYS: int = 60
    TRADE_IN_MARKUP: float = 1.2

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def sqlalchemy_database_url(self) -> str:
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url


settings = Settings()
