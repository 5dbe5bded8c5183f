"""One measurement cycle: fetch → capture → resolve → append.

:class:`DriftEngine` wires the four capabilities together and is the
single place where failures are caught.  Each failure becomes a
terminal :class:`CycleOutcome` with a structured
:class:`~watchdrift._errors.ErrorPayload`; nothing is retried and
nothing propagates to the caller.

Ordering guarantees:

- The reference time is fetched before the operator is prompted, so a
  network failure aborts the cycle with no prompt shown.
- A cancelled or timed-out capture writes nothing.
- The store is touched only after a successful resolution.
- The operator's reaction time is measured from the moment the
  reference reply arrived, so front-end start-up latency is counted.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime

from watchdrift._capture import DEFAULT_PROMPT, CaptureFrontEnd
from watchdrift._clock import ClockPort, SystemClock
from watchdrift._errors import (
    ErrorPayload,
    ReferenceTimeError,
    ResolutionAmbiguousError,
    StorageError,
    build_error_payload,
)
from watchdrift._reference import ReferenceClockPort
from watchdrift._resolver import OffsetResolver, ResolutionMode, ResolvedOffset
from watchdrift._settings import DEFAULT_SERVER
from watchdrift._store import MeasurementRecord, MeasurementSink

logger = logging.getLogger(__name__)

NEXT_TIME = "Next time!"


class CycleStatus(enum.Enum):
    RECORDED = "recorded"
    CANCELLED = "cancelled"
    REFERENCE_FAILED = "reference_failed"
    CAPTURE_FAILED = "capture_failed"
    RESOLUTION_FAILED = "resolution_failed"
    STORAGE_FAILED = "storage_failed"


@dataclass(frozen=True, slots=True)
class CycleOutcome:
    """Terminal state of one :meth:`DriftEngine.measure` call."""

    status: CycleStatus
    message: str
    offset: ResolvedOffset | None = None
    record: MeasurementRecord | None = None
    error: ErrorPayload | None = None

    @property
    def ok(self) -> bool:
        return self.status in (CycleStatus.RECORDED, CycleStatus.CANCELLED)


def describe_offset(diff: int) -> str:
    """Human wording for a drift value."""
    if diff > 0:
        return f"{diff}s fast"
    if diff < 0:
        return f"{-diff}s slow"
    return "on time"


@dataclass
class DriftEngine:
    """Runs measurement cycles against injected capabilities.

    Args:
        reference: Reference-time capability (``fetch``).
        front_end: Operator interaction (``capture``/``choose_minute``).
        store: Persistence capability (``append``).
        server: NTP server as ``host[:port]``.
        timeout: NTP reply timeout in seconds.
        max_wait: Capture session ceiling in seconds.
        poll_interval: Input poll bound in seconds.
        mode: Minute resolution strategy.
        clock: Wall-clock callable used to timestamp error payloads.
        monotonic: Clock read when the reference reply arrives.  Must be
            the clock the front end's capture session reads;
            defaults to :class:`~watchdrift._clock.SystemClock`.
    """

    reference: ReferenceClockPort
    front_end: CaptureFrontEnd
    store: MeasurementSink
    server: str = DEFAULT_SERVER
    timeout: float = 2.0
    max_wait: float = 70.0
    poll_interval: float = 0.5
    mode: ResolutionMode = ResolutionMode.AUTOMATIC
    clock: Callable[[], datetime] | None = field(default=None, repr=False)
    monotonic: ClockPort = field(default_factory=SystemClock, repr=False)

    def _fail(
        self, status: CycleStatus, error: Exception, watch: str
    ) -> CycleOutcome:
        payload = build_error_payload(error, watch=watch, clock=self.clock)
        logger.warning(
            "Cycle failed: %s (type=%s, watch=%s)",
            payload.message,
            payload.error_type,
            watch,
            extra={"watch": watch, "error_type": payload.error_type},
        )
        return CycleOutcome(status=status, message=payload.message, error=payload)

    def measure(
        self,
        name: str = "main",
        *,
        sync: bool = False,
        comment: str | None = None,
        prompt: str = DEFAULT_PROMPT,
    ) -> CycleOutcome:
        """Run one full cycle for watch *name*."""
        try:
            reference = self.reference.fetch(self.server, self.timeout)
        except ReferenceTimeError as exc:
            return self._fail(CycleStatus.REFERENCE_FAILED, exc, name)
        anchor = self.monotonic.now()
        logger.debug("Reference time %r from %s", reference, self.server)

        # front ends talk to terminals and window systems; any failure
        # there ends the cycle like the other component failures
        try:
            capture = self.front_end.capture(
                prompt, self.max_wait, self.poll_interval, anchor
            )
        except Exception as exc:
            return self._fail(CycleStatus.CAPTURE_FAILED, exc, name)

        resolver = OffsetResolver(self.mode, chooser=self.front_end.choose_minute)
        try:
            offset = resolver.resolve(reference, capture)
        except ResolutionAmbiguousError as exc:
            return self._fail(CycleStatus.RESOLUTION_FAILED, exc, name)
        except Exception as exc:
            return self._fail(CycleStatus.CAPTURE_FAILED, exc, name)
        if offset is None:
            return CycleOutcome(status=CycleStatus.CANCELLED, message=NEXT_TIME)

        record = MeasurementRecord(
            timestamp=offset.true_second,
            diff=offset.final_offset_seconds,
            sync=sync,
            name=name,
            comment=comment or None,
        )
        try:
            stored = self.store.append(record)
        except StorageError as exc:
            failed = self._fail(CycleStatus.STORAGE_FAILED, exc, name)
            return replace(failed, offset=offset)

        logger.info(
            "Recorded %+ds for %s at %d",
            stored.diff,
            name,
            stored.timestamp,
            extra={"watch": name, "offset": stored.diff},
        )
        return CycleOutcome(
            status=CycleStatus.RECORDED,
            message=f"Watch {name!r} is {describe_offset(stored.diff)}",
            offset=offset,
            record=stored,
        )
