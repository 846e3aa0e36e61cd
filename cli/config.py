from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from settings import get_settings

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080

_HOST_ENV = "SERVER_HOST"
_PORT_ENV = "SERVER_PORT"


@dataclass(frozen=True)
class CLIConfig:
    device_url: str
    timeout: float
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def _read_port(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def load_config(
    device_url: Optional[str] = None,
    timeout: Optional[float] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> CLIConfig:
    settings = get_settings()
    return CLIConfig(
        device_url=device_url or settings.device_url,
        timeout=timeout if timeout is not None and timeout > 0 else settings.request_timeout,
        host=host or os.getenv(_HOST_ENV) or DEFAULT_HOST,
        port=port if port is not None else _read_port(os.getenv(_PORT_ENV), DEFAULT_PORT),
    )
