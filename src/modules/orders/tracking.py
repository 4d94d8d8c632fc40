"""Tracking-number generation.

Format: ``LMI`` + base36(epoch milliseconds) + 3 random base36 characters,
all uppercase, e.g. ``LMIM2X9Q4ZK7QF``.

The millisecond component is kept strictly increasing per generator
instance, so numbers produced in sequence by one process never repeat even
when many are requested within the same millisecond.  Cross-process
uniqueness is guaranteed by the ``UNIQUE`` constraint on
``orders.tracking_number``; the repository regenerates on collision.
"""

from __future__ import annotations

import secrets
import threading
import time
from typing import Callable, Optional

from modules.orders.constants import (
    BASE36_ALPHABET,
    TRACKING_NUMBER_PREFIX,
    TRACKING_NUMBER_SUFFIX_LENGTH,
)


def to_base36(value: int) -> str:
    """Uppercase base36 rendering of a non-negative integer."""
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def random_suffix(length: int = TRACKING_NUMBER_SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


class TrackingNumberGenerator:
    """Thread-safe, per-process monotonic tracking-number source."""

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._last_millis = 0
        self._lock = threading.Lock()

    def _next_millis(self) -> int:
        with self._lock:
            millis = max(self._clock(), self._last_millis + 1)
            self._last_millis = millis
            return millis

    def __call__(self) -> str:
        return f"{TRACKING_NUMBER_PREFIX}{to_base36(self._next_millis())}{random_suffix()}"


generate_tracking_number = TrackingNumberGenerator()
