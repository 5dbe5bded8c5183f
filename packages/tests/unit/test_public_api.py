"""Unit tests for the watchdrift top-level public API surface.

Test Techniques Used:
    - Specification-based Testing: ``__all__`` completeness.
    - Importability: Every name in ``__all__`` resolves via ``getattr``.
"""

from __future__ import annotations

import watchdrift
import watchdrift.testing


class TestWatchdriftPublicAPI:
    """All expected symbols are importable and listed in ``__all__``."""

    EXPECTED_NAMES = {
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
    }

    def test_all_contains_expected_symbols(self) -> None:
        """``__all__`` matches the documented public API exactly."""
        assert set(watchdrift.__all__) == self.EXPECTED_NAMES

    def test_every_name_resolves(self) -> None:
        """Every exported name is a real attribute of the package."""
        for name in watchdrift.__all__:
            assert getattr(watchdrift, name) is not None, name


class TestTestingNamespace:
    """``watchdrift.testing`` re-exports its doubles."""

    def test_every_name_resolves(self) -> None:
        for name in watchdrift.testing.__all__:
            assert getattr(watchdrift.testing, name) is not None, name
