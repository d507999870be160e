# config.py
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic_settings import BaseSettings
from pydantic import Field


DEFAULT_SHIFT_TIMINGS: Dict[str, List[str]] = {
    "DAY/NOT_OVERTIME": ["07:00", "16:00"],
    "DAY/OVERTIME": ["07:00", "19:00"],
    "NIGHT/NOT_OVERTIME": ["19:00", "04:00"],
    "NIGHT/OVERTIME": ["19:00", "07:00"],
}


class Settings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # DB
    # left unset, no DB URL is built and the in-memory store is used
    DB_HOST: Optional[str] = Field(None)
    DB_PORT: int = Field(5432)
    DB_NAME: Optional[str] = Field(None)
    DB_USER: Optional[str] = Field(None)
    DB_PASS: Optional[str] = Field(None)

    DATABASE_URL: Optional[str] = Field(None)

    # serve dashboards from the in-memory store instead of the DB
    USE_MEMORY_STORE: bool = Field(False)

    # Reference time zone for day / shift / month windows
    TIMEZONE: str = Field("Asia/Bangkok")

    # "SHIFT/WORKING_TIME_TYPE" -> [start "HH:MM", end "HH:MM"]
    SHIFT_TIMINGS: Dict[str, List[str]] = Field(default_factory=lambda: dict(DEFAULT_SHIFT_TIMINGS))

    # App
    LOG_LEVEL: str = Field("INFO")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])
    APP_HOST: str = Field("0.0.0.0")
    APP_PORT: int = Field(8000)


@lru_cache()
def get_settings():
    return Settings()
