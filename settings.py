from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_DEVICE_URL_ENV = "SENSOR_DEVICE_URL"
_REQUEST_TIMEOUT_ENV = "SENSOR_REQUEST_TIMEOUT"
_DATABASE_PATH_ENV = "DATABASE_PATH"
_WINDOW_HOURS_ENV = "DEFAULT_WINDOW_HOURS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    device_url: str
    request_timeout: float
    database_path: Optional[str]
    default_window_hours: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        device_url=_read_str_env(_DEVICE_URL_ENV, "http://192.168.1.100/json"),
        request_timeout=_read_positive_float(_REQUEST_TIMEOUT_ENV, 10.0),
        database_path=_read_optional_env(_DATABASE_PATH_ENV, "air_quality.db"),
        default_window_hours=_read_positive_int(_WINDOW_HOURS_ENV, 24),
        log_level=_read_log_level("INFO"),
    )
