"""
Centralised application settings loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseSettings):
    # ── Database ─────────────────────────────────────────
    postgres_user: str = "stays"
    postgres_password: str = "stays_pw"
    postgres_db: str = "stays"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    db_url: str = ""  # full SQLAlchemy URL, overrides the postgres_* fields

    # ── Search ───────────────────────────────────────────
    default_per_page: int = 15
    max_per_page: int = 100
    filter_strict_mode: bool = False
    search_log_enabled: bool = True
    query_timeout_ms: int = 10_000

    # ── App ──────────────────────────────────────────────
    api_port: int = 8000
    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
