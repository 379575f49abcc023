"""
Time helpers.

All stored timestamps are naive UTC. Components take a ``now_fn`` so tests
can drive them with a simulated clock.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
