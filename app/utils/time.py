from __future__ import annotations

"""Time utilities: utcnow and the millisecond wall clock used by polling."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return current UTC datetime (timezone-aware)."""

    return datetime.now(timezone.utc)


def epoch_ms() -> int:
    """Return wall-clock milliseconds since the epoch."""

    return int(utcnow().timestamp() * 1000)


def ms_to_seconds(value_ms: int) -> float:
    return value_ms / 1000
