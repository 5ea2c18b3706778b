"""Environment settings helpers provided via Common Layer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_TIMEOUT_MS = 180_000
DEFAULT_POLL_INTERVAL_SECONDS = 6.0
DEFAULT_LOG_LEVEL = "INFO"


def _env_float(name: str, default: float) -> float:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return value


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return value


@dataclass(frozen=True)
class WaiterSettings:
    environment: Optional[str]
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def load() -> "WaiterSettings":
        return WaiterSettings(
            environment=os.environ.get("ENVIRONMENT"),
            poll_interval_seconds=_env_float("ECS_WAITER_POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS),
            default_timeout_ms=_env_int("ECS_WAITER_DEFAULT_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
            log_level=(os.environ.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
        )
