# app/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./parking.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "127.0.0.1"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on API endpoints

    # ── Lot layout ────────────────────────────────────────────────────────
    LOT_ROWS: int = 4               # Hard maximum is 4 rows
    LOT_COLS: int = 5               # Hard maximum is 5 columns
    QUEUE_CAPACITY: int = 50

    # ── Billing ───────────────────────────────────────────────────────────
    RATE_PER_HOUR: float = 20.0

    # ── Persistence ───────────────────────────────────────────────────────
    STATE_FILE: str = "state.json"
    RECORDS_FILE: str = "records.txt"
    VISIT_LOG_BACKEND: str = "database"     # database | text
    LOAD_STATE_ON_STARTUP: bool = True
    SAVE_STATE_ON_SHUTDOWN: bool = True

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"                  # empty string = console only
    LOG_FILE: str = "parking.log"
    LOG_MAX_BYTES: int = 2 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
