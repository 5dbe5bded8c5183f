"""Unit tests for watchdrift._clock: monotonic clock port.

Test Techniques Used:
    - Protocol Conformance: isinstance checks for structural subtyping
    - Boundary Value Analysis: Monotonic ordering guarantees
"""

from __future__ import annotations

from watchdrift._clock import ClockPort, SystemClock
from watchdrift.testing import FakeClock


class TestSystemClock:
    """Technique: Specification-based Testing."""

    def test_satisfies_clock_port_protocol(self) -> None:
        assert isinstance(SystemClock(), ClockPort)

    def test_now_returns_float(self) -> None:
        assert isinstance(SystemClock().now(), float)

    def test_now_is_monotonically_non_decreasing(self) -> None:
        clock = SystemClock()
        t1 = clock.now()
        t2 = clock.now()
        assert t2 >= t1


class TestFakeClock:
    """Technique: Protocol Conformance."""

    def test_satisfies_clock_port_protocol(self) -> None:
        assert isinstance(FakeClock(), ClockPort)

    def test_advance_moves_time_forward(self) -> None:
        clock = FakeClock(10.0)
        clock.advance(0.25)
        assert clock.now() == 10.25

    def test_class_without_now_does_not_satisfy(self) -> None:
        class NotAClock:
            pass

        assert not isinstance(NotAClock(), ClockPort)
