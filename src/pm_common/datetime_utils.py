"""UTC datetime utilities and the clock used for market time gates."""

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], int]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def unix_now() -> int:
    """Current unix timestamp in whole seconds."""
    return int(utc_now().timestamp())
