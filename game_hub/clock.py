from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Game engines never read real time directly; they see time only through a
    scheduler built on top of this interface.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


def to_ms(seconds: float) -> int:
    """Whole milliseconds, rounded so accumulated float steps land on the tick."""

    return int(round(float(seconds) * 1000.0))
