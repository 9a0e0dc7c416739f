"""
Runtime settings for the Pill Reminder backend, resolved from environment variables.
"""
import os
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache
from typing import Optional


def parse_epoch(value: str) -> date:
    epoch = date.fromisoformat(value)
    # index = week_half * 7 + weekday only lines up when the cycle starts on a Monday
    if epoch.weekday() != 0:
        raise ValueError(f"SCHEDULE_EPOCH must be a Monday, got {epoch.isoformat()} ({epoch.strftime('%A')})")
    return epoch


@dataclass
class Settings:
    database_url: Optional[str] = field(default_factory=lambda: os.getenv("DATABASE_URL"))
    database_name: Optional[str] = field(default_factory=lambda: os.getenv("DATABASE_NAME"))
    schedule_epoch: date = field(default_factory=lambda: parse_epoch(os.getenv("SCHEDULE_EPOCH", "2024-01-01")))
    morning_time: str = field(default_factory=lambda: os.getenv("MORNING_TIME", "08:00"))
    evening_time: str = field(default_factory=lambda: os.getenv("EVENING_TIME", "20:00"))
    dose_window_minutes: int = field(default_factory=lambda: int(os.getenv("DOSE_WINDOW_MINUTES", "60")))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
