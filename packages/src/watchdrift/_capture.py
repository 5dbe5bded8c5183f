"""Operator capture session.

The operator watches the second hand and clicks the instant it crosses
"12".  :class:`CaptureSession` measures the time from the prompt to
that click.  Front ends only have to translate their native input into
:class:`InputEvent` values through an :class:`InputSource`; the poll
loop, timeout and elapsed-time arithmetic live here once.

Polling is blocking with a bounded interval: each ``poll()`` waits at
most ``poll_interval`` seconds, after which the loop re-checks the
session ceiling.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from watchdrift._clock import ClockPort, SystemClock

if TYPE_CHECKING:
    from watchdrift._resolver import MinuteCandidate

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Press the mouse when the seconds reach 12'clock position."
STILL_THERE = "Still there?"


class InputEvent(enum.Enum):
    """Qualifying operator input."""

    CAPTURE = "capture"
    CANCEL = "cancel"


@dataclass(frozen=True, slots=True)
class CaptureResult:
    """Outcome of one capture session.

    ``elapsed`` is only meaningful when ``triggered`` is true.
    """

    elapsed: timedelta
    triggered: bool

    @classmethod
    def cancelled(cls) -> CaptureResult:
        return cls(elapsed=timedelta(0), triggered=False)

    @property
    def elapsed_ms(self) -> int:
        """Elapsed time in whole milliseconds, truncated."""
        return self.elapsed // timedelta(milliseconds=1)


@runtime_checkable
class InputSource(Protocol):
    """Blocking, bounded source of operator input."""

    def poll(self, timeout: float) -> InputEvent | None:
        """Wait up to *timeout* seconds for a qualifying event.

        Returns ``None`` when nothing qualifying arrived; unrelated
        input (other keys, mouse moves) is consumed and ignored.
        """
        ...


@runtime_checkable
class CaptureFrontEnd(Protocol):
    """A way of talking to the operator: terminal or graphical."""

    def capture(
        self,
        prompt: str,
        max_wait: float,
        poll_interval: float,
        anchor: float | None = None,
    ) -> CaptureResult:
        """Prompt, then wait for one capture or cancel event.

        *anchor* is a monotonic clock reading to measure ``elapsed``
        from; see :meth:`CaptureSession.run`.
        """
        ...

    def choose_minute(
        self, candidates: Sequence[MinuteCandidate]
    ) -> MinuteCandidate | None:
        """Ask which minute the second hand was approaching.

        Returns ``None`` when the operator declines to choose.
        """
        ...


class CaptureSession:
    """Times a single operator event against a monotonic clock.

    Args:
        source: Where operator input comes from.
        clock: Monotonic clock; defaults to :class:`SystemClock`.
        announce: Shows text to the operator; defaults to a no-op so
            front ends that render their own prompt need not pass it.
        max_wait: Session ceiling in seconds.
        poll_interval: Upper bound for one ``source.poll`` call.
    """

    def __init__(
        self,
        source: InputSource,
        *,
        clock: ClockPort | None = None,
        announce: Callable[[str], None] | None = None,
        max_wait: float = 70.0,
        poll_interval: float = 0.5,
    ) -> None:
        if max_wait <= 0:
            raise ValueError(f"max_wait must be positive, got {max_wait}")
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        self._source = source
        self._clock = clock if clock is not None else SystemClock()
        self._announce = announce if announce is not None else (lambda _text: None)
        self._max_wait = max_wait
        self._poll_interval = poll_interval

    def run(
        self, prompt: str = DEFAULT_PROMPT, *, anchor: float | None = None
    ) -> CaptureResult:
        """Announce *prompt* and wait for the operator.

        Args:
            prompt: Text shown before waiting.
            anchor: Clock reading the reported ``elapsed`` is measured
                from, typically taken when the reference time arrived.
                Defaults to the moment the prompt was announced.  The
                ``max_wait`` ceiling always counts from the prompt.
        """
        self._announce(prompt)
        start = self._clock.now()
        origin = start if anchor is None else min(anchor, start)

        while True:
            event = self._source.poll(self._poll_interval)
            now = self._clock.now()
            waited = now - start

            if event is InputEvent.CANCEL:
                logger.info("Capture cancelled after %.3fs", waited)
                return CaptureResult.cancelled()
            if event is InputEvent.CAPTURE:
                elapsed = now - origin
                logger.debug(
                    "Captured after %.3fs (%.3fs since anchor)", waited, elapsed
                )
                return CaptureResult(
                    elapsed=timedelta(seconds=max(elapsed, 0.0)),
                    triggered=True,
                )
            if waited > self._max_wait:
                self._announce(STILL_THERE)
                logger.info("Capture timed out after %.1fs", waited)
                return CaptureResult.cancelled()
