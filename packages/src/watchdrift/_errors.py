"""Error taxonomy and structured error payloads.

Every failure a measurement cycle can hit is one of four kinds:

- :class:`NetworkError`: the NTP request could not be sent, the
  server name did not resolve, or the reply was malformed.
- :class:`ReferenceTimeoutError`: no NTP reply within the timeout.
- :class:`ResolutionAmbiguousError`: the measurement itself is not
  trustworthy (wrong minute, or the operator declined to choose).
- :class:`StorageError`: the measurement could not be saved.

The engine never lets these escape.  It turns each one into an
:class:`ErrorPayload` so the caller can tell whether the *measurement*
or the *save* failed, log it, and pick an exit code.

Payload schema::

    {
        "error_type": "storage",
        "message": "UNIQUE constraint failed: measurements.ts",
        "watch": "main" | null,
        "timestamp": "2026-02-14T12:34:56+00:00",
        "details": {}
    }
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class WatchDriftError(Exception):
    """Base class for all watchdrift failures."""


class ReferenceTimeError(WatchDriftError):
    """The reference time could not be obtained."""


class NetworkError(ReferenceTimeError):
    """Sending or receiving the NTP exchange failed."""


class ReferenceTimeoutError(ReferenceTimeError):
    """The NTP server did not answer in time."""


class ResolutionAmbiguousError(WatchDriftError):
    """The offset could not be resolved to a single trustworthy minute."""


class StorageError(WatchDriftError):
    """Opening, initialising, reading or writing the store failed."""


ERROR_TYPES: dict[type[Exception], str] = {
    NetworkError: "network",
    ReferenceTimeoutError: "timeout",
    ResolutionAmbiguousError: "resolution_ambiguous",
    StorageError: "storage",
}
"""Machine-readable ``error_type`` for each domain exception."""

# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """Immutable structured description of one failed cycle."""

    error_type: str
    message: str
    watch: str | None
    timestamp: str
    details: dict[str, object] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialise to a JSON string."""
        return json.dumps(asdict(self))


# ---------------------------------------------------------------------------
# Payload builder
# ---------------------------------------------------------------------------


def build_error_payload(
    error: Exception,
    *,
    error_type_map: dict[type[Exception], str] | None = None,
    watch: str | None = None,
    details: dict[str, object] | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ErrorPayload:
    """Convert an exception into an :class:`ErrorPayload`.

    Looks up the exact class of the exception; subclasses are not
    matched.

    Args:
        error: The exception to convert.
        error_type_map: Mapping from exception types to ``error_type``
            strings.  Defaults to :data:`ERROR_TYPES`; unmapped types
            become ``"error"``.
        watch: Watch identifier the failed cycle was measuring.
        details: Extra context to attach.
        clock: Callable returning the current time; defaults to
            ``datetime.now(UTC)``.
    """
    resolved_map = ERROR_TYPES if error_type_map is None else error_type_map
    error_type = resolved_map.get(type(error), "error")
    now = clock() if clock is not None else datetime.now(UTC)
    return ErrorPayload(
        error_type=error_type,
        message=str(error),
        watch=watch,
        timestamp=now.isoformat(),
        details=details or {},
    )
