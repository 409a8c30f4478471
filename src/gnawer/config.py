from enum import Enum

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # DB
    database_path: str = "db/news.db"

    # HTTP
    http_timeout: float = 15.0
    user_agent: str = "Mozilla/5.0 (compatible; gnawer/0.1)"

    # Collection
    fetch_workers: int = 4
    # Off: relative hrefs are joined onto the link selector, as gnawer always did.
    # On: relative hrefs are resolved against the listing page URL.
    resolve_links_against_page: bool = False

    # Logging
    log_level: LogLevel = LogLevel.INFO

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept level names in any case, e.g. LOG_LEVEL=debug."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


settings = Settings()
