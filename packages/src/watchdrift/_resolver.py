"""Offset resolution.

The capture instant is the reference timestamp plus the operator's
reaction interval.  Its second-within-minute ``s`` tells how far the
watch is from true time, except for one thing it cannot tell: which
minute the watch's second hand was approaching.  A watch 3 s fast
reaches "12" at true second 57 of the *previous* minute; a watch 3 s
slow reaches it at true second 3 of the *current* one.

Two resolution modes cover that ambiguity:

- **automatic** assumes the nearer minute boundary::

      offset = -s        if s < 30
      offset = 60 - s    otherwise

- **interactive** lets the operator pick the minute before (-60),
  of (0) or after (+60) the capture instant::

      offset = adjustment - s

A resolved offset must lie in ``(-30, +30]``.  Anything larger means
the wrong minute was chosen and is rejected with
:class:`ResolutionAmbiguousError`.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from watchdrift._capture import CaptureResult
from watchdrift._errors import ResolutionAmbiguousError
from watchdrift._reference import ReferenceTimestamp

logger = logging.getLogger(__name__)

HALF_MINUTE = 30
MINUTE_ADJUSTMENTS: tuple[int, ...] = (-60, 0, 60)


class ResolutionMode(enum.Enum):
    AUTOMATIC = "automatic"
    INTERACTIVE = "interactive"


@dataclass(frozen=True, slots=True)
class ResolvedOffset:
    """A drift measurement tied to a true-time second.

    Attributes:
        true_second: Reference seconds at the capture instant.
        minute_adjustment: Seconds added to pick the minute, one of
            -60, 0, +60.
        final_offset_seconds: Drift; positive means the watch is fast.
        residual_ms: Sub-second remainder of the capture instant,
            dropped from the offset.
    """

    true_second: int
    minute_adjustment: int
    final_offset_seconds: int
    residual_ms: int = 0

    @property
    def capture_second(self) -> int:
        return self.true_second % 60


@dataclass(frozen=True, slots=True)
class MinuteCandidate:
    """One choice offered to the operator in interactive mode."""

    label: str
    adjustment: int
    minute: int

    def __str__(self) -> str:
        return f"{self.minute:02d} ({self.label})"


MinuteChooser = Callable[[Sequence[MinuteCandidate]], MinuteCandidate | None]


def capture_instant(
    reference: ReferenceTimestamp, capture: CaptureResult
) -> tuple[int, int]:
    """Return ``(true_second, residual_ms)`` of the capture.

    Milliseconds of the reference fraction and of the elapsed interval
    are summed; whole seconds of the sum carry into ``true_second``.
    """
    total_ms = reference.millis + capture.elapsed_ms
    carry, residual_ms = divmod(total_ms, 1000)
    return reference.seconds + carry, residual_ms


def minute_candidates(true_second: int) -> list[MinuteCandidate]:
    """Minute before, of and after the capture instant (minute-of-hour)."""
    minute = (true_second // 60) % 60
    labels = ("minute before", "minute of", "minute after")
    return [
        MinuteCandidate(label=label, adjustment=adj, minute=(minute + adj // 60) % 60)
        for label, adj in zip(labels, MINUTE_ADJUSTMENTS, strict=True)
    ]


def _checked(true_second: int, adjustment: int, residual_ms: int) -> ResolvedOffset:
    offset = adjustment - true_second % 60
    if not -HALF_MINUTE < offset <= HALF_MINUTE:
        raise ResolutionAmbiguousError(
            f"Offset {offset:+d}s is outside (-{HALF_MINUTE}, +{HALF_MINUTE}]; "
            f"the wrong minute was probably chosen"
        )
    return ResolvedOffset(
        true_second=true_second,
        minute_adjustment=adjustment,
        final_offset_seconds=offset,
        residual_ms=residual_ms,
    )


def resolve_automatic(true_second: int, residual_ms: int = 0) -> ResolvedOffset:
    """Resolve against the nearer minute boundary."""
    adjustment = 0 if true_second % 60 < HALF_MINUTE else 60
    return _checked(true_second, adjustment, residual_ms)


def resolve_interactive(
    true_second: int, adjustment: int, residual_ms: int = 0
) -> ResolvedOffset:
    """Resolve against the minute the operator picked.

    Raises:
        ValueError: *adjustment* is not -60, 0 or +60.
        ResolutionAmbiguousError: The result is more than half a minute off.
    """
    if adjustment not in MINUTE_ADJUSTMENTS:
        raise ValueError(f"adjustment must be one of {MINUTE_ADJUSTMENTS}")
    return _checked(true_second, adjustment, residual_ms)


class OffsetResolver:
    """Turns a reference timestamp and a capture into a drift.

    Args:
        mode: Automatic or interactive resolution.
        chooser: Asks the operator for a :class:`MinuteCandidate`;
            required in interactive mode.
    """

    def __init__(
        self,
        mode: ResolutionMode = ResolutionMode.AUTOMATIC,
        chooser: MinuteChooser | None = None,
    ) -> None:
        if mode is ResolutionMode.INTERACTIVE and chooser is None:
            raise ValueError("interactive resolution needs a minute chooser")
        self.mode = mode
        self._chooser = chooser

    def resolve(
        self, reference: ReferenceTimestamp, capture: CaptureResult
    ) -> ResolvedOffset | None:
        """Return the resolved offset, or ``None`` if nothing was captured.

        Raises:
            ResolutionAmbiguousError: No minute was chosen, or the
                offset failed the half-minute check.
        """
        if not capture.triggered:
            return None

        true_second, residual_ms = capture_instant(reference, capture)
        logger.debug(
            "Capture instant %d.%03d (second %d)",
            true_second,
            residual_ms,
            true_second % 60,
        )

        if self.mode is ResolutionMode.AUTOMATIC:
            return resolve_automatic(true_second, residual_ms)

        assert self._chooser is not None
        choice = self._chooser(minute_candidates(true_second))
        if choice is None:
            raise ResolutionAmbiguousError("No minute was selected")
        return resolve_interactive(true_second, choice.adjustment, residual_ms)
