from __future__ import annotations

"""Text helpers for host-supplied option values."""

from typing import Iterable


def split_csv(value: str | Iterable[str] | None) -> list[str]:
    """Split a comma-separated value into trimmed, non-empty entries.

    Lists are accepted too (each entry is trimmed the same way), so values
    that already went through the host's own list widgets pass unchanged.
    """

    if value is None:
        return []
    parts = value.split(",") if isinstance(value, str) else value
    return [p.strip() for p in parts if p and p.strip()]
