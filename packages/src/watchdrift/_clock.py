"""Monotonic clock used to time the operator's reaction.

The interval between showing the prompt and the operator's click is
added to a network timestamp already in hand, so it must not jump when
the system clock is stepped.  ``time.monotonic()`` gives exactly that;
only differences between two readings carry meaning.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Source of monotonic seconds for elapsed-time measurement.

    Tests substitute :class:`watchdrift.testing.FakeClock`.
    """

    def now(self) -> float:
        """Return seconds from an arbitrary, fixed epoch."""
        ...


class SystemClock:
    """:class:`ClockPort` backed by ``time.monotonic()``."""

    def now(self) -> float:
        return time.monotonic()
