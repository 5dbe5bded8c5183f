"""watchdrift.

Measure how far a mechanical watch drifts from true time: fetch a
network reference, time the operator's click as the second hand
crosses "12", resolve the minute, and log the offset.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("watchdrift")
except PackageNotFoundError:
    # Source checkout without installed metadata
    __version__ = "0.0.0+unknown"

from watchdrift._capture import (  # noqa: E402
    CaptureFrontEnd,
    CaptureResult,
    CaptureSession,
    InputEvent,
    InputSource,
)
from watchdrift._clock import ClockPort, SystemClock  # noqa: E402
from watchdrift._engine import CycleOutcome, CycleStatus, DriftEngine  # noqa: E402
from watchdrift._errors import (  # noqa: E402
    ErrorPayload,
    NetworkError,
    ReferenceTimeError,
    ReferenceTimeoutError,
    ResolutionAmbiguousError,
    StorageError,
    WatchDriftError,
    build_error_payload,
)
from watchdrift._logging import JsonFormatter, configure_logging  # noqa: E402
from watchdrift._reference import (  # noqa: E402
    NtpReferenceClock,
    ReferenceClockPort,
    ReferenceTimestamp,
    parse_server_address,
)
from watchdrift._resolver import (  # noqa: E402
    MinuteCandidate,
    OffsetResolver,
    ResolutionMode,
    ResolvedOffset,
    capture_instant,
    minute_candidates,
    resolve_automatic,
    resolve_interactive,
)
from watchdrift._settings import (  # noqa: E402
    CaptureSettings,
    LoggingSettings,
    ReferenceSettings,
    Settings,
)
from watchdrift._store import (  # noqa: E402
    MeasurementRecord,
    MeasurementSink,
    MeasurementStore,
)

__all__ = [
    # Version
    "__version__",
    # Capture
    "CaptureFrontEnd",
    "CaptureResult",
    "CaptureSession",
    "InputEvent",
    "InputSource",
    # Clock
    "ClockPort",
    "SystemClock",
    # Engine
    "CycleOutcome",
    "CycleStatus",
    "DriftEngine",
    # Errors
    "ErrorPayload",
    "NetworkError",
    "ReferenceTimeError",
    "ReferenceTimeoutError",
    "ResolutionAmbiguousError",
    "StorageError",
    "WatchDriftError",
    "build_error_payload",
    # Logging
    "JsonFormatter",
    "configure_logging",
    # Reference
    "NtpReferenceClock",
    "ReferenceClockPort",
    "ReferenceTimestamp",
    "parse_server_address",
    # Resolver
    "MinuteCandidate",
    "OffsetResolver",
    "ResolutionMode",
    "ResolvedOffset",
    "capture_instant",
    "minute_candidates",
    "resolve_automatic",
    "resolve_interactive",
    # Settings
    "CaptureSettings",
    "LoggingSettings",
    "ReferenceSettings",
    "Settings",
    # Store
    "MeasurementRecord",
    "MeasurementSink",
    "MeasurementStore",
]
