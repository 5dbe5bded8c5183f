"""Unit tests for watchdrift.testing: public test-support utilities.

Test Techniques Used:
    - Specification-based Testing: ``__all__`` and factory defaults
    - Protocol Conformance: doubles satisfy the engine's ports
    - Fixture Injection: plugin fixtures available without a conftest
"""

from __future__ import annotations

from datetime import timedelta

import pytest

import watchdrift.testing as testing_mod
from watchdrift._capture import CaptureFrontEnd, CaptureResult, InputEvent, InputSource
from watchdrift._clock import ClockPort
from watchdrift._errors import StorageError
from watchdrift._reference import ReferenceClockPort, ReferenceTimestamp
from watchdrift._resolver import minute_candidates
from watchdrift._store import MeasurementRecord, MeasurementSink, MeasurementStore
from watchdrift.testing import (
    FakeClock,
    FakeFrontEnd,
    FakeNtpClient,
    FakeReferenceClock,
    IsolatedSettings,
    MemoryMeasurementStore,
    ScriptedInputSource,
    make_settings,
)


class TestPublicAPI:
    """Technique: Specification-based Testing."""

    def test_all_lists_every_double(self) -> None:
        assert set(testing_mod.__all__) == {
            "FakeClock",
            "FakeFrontEnd",
            "FakeNtpClient",
            "FakeReferenceClock",
            "IsolatedSettings",
            "MemoryMeasurementStore",
            "ScriptedInputSource",
            "make_settings",
        }


class TestProtocolConformance:
    """Technique: Protocol Conformance via runtime_checkable."""

    def test_fake_clock(self) -> None:
        assert isinstance(FakeClock(), ClockPort)

    def test_fake_reference(self) -> None:
        assert isinstance(FakeReferenceClock(), ReferenceClockPort)

    def test_scripted_input(self) -> None:
        assert isinstance(ScriptedInputSource(FakeClock()), InputSource)

    def test_fake_front_end(self) -> None:
        assert isinstance(FakeFrontEnd(), CaptureFrontEnd)

    def test_memory_store(self) -> None:
        assert isinstance(MemoryMeasurementStore(), MeasurementSink)


class TestFakeClock:
    def test_advance(self) -> None:
        clock = FakeClock(5.0)
        clock.advance(0.25)
        assert clock.now() == 5.25


class TestScriptedInputSource:
    """Technique: State-based Testing."""

    def test_replays_then_goes_quiet(self) -> None:
        clock = FakeClock()
        source = ScriptedInputSource(clock, [None, InputEvent.CAPTURE])
        assert source.poll(0.5) is None
        assert source.poll(0.5) is InputEvent.CAPTURE
        assert source.poll(0.5) is None
        assert clock.now() == 1.5
        assert source.polls == [0.5, 0.5, 0.5]

    def test_step_is_capped_by_timeout(self) -> None:
        clock = FakeClock()
        source = ScriptedInputSource(clock, [InputEvent.CAPTURE], step=0.1)
        source.poll(0.5)
        source.poll(0.05)
        assert clock.now() == pytest.approx(0.15)


class TestFakeFrontEnd:
    def test_default_capture(self) -> None:
        front_end = FakeFrontEnd()
        result = front_end.capture("prompt", 70.0, 0.5)
        assert result == CaptureResult(elapsed=timedelta(0), triggered=True)
        assert front_end.prompts == ["prompt"]
        assert front_end.anchors == [None]

    def test_records_anchor(self) -> None:
        front_end = FakeFrontEnd()
        front_end.capture("prompt", 70.0, 0.5, 12.5)
        assert front_end.anchors == [12.5]

    def test_picks_candidate_by_adjustment(self) -> None:
        choice = FakeFrontEnd(adjustment=60).choose_minute(minute_candidates(600))
        assert choice is not None
        assert choice.minute == 11

    def test_declines(self) -> None:
        assert FakeFrontEnd(adjustment=None).choose_minute(minute_candidates(600)) is None


class TestFakeNtpClient:
    def test_records_request(self) -> None:
        client = FakeNtpClient(tx_time=1.5)
        response = client.request("pool.ntp.org", version=3, port=123, timeout=2.0)
        assert response.tx_time == 1.5
        assert client.requests == [
            {"host": "pool.ntp.org", "version": 3, "port": 123, "timeout": 2.0}
        ]

    def test_raises_configured_error(self) -> None:
        client = FakeNtpClient(error=OSError("down"))
        with pytest.raises(OSError, match="down"):
            client.request("pool.ntp.org")


class TestMemoryMeasurementStore:
    """Technique: Specification-based Testing (same rules as SQLite)."""

    def test_bootstrap_sync_and_duplicates(self) -> None:
        store = MemoryMeasurementStore()
        first = store.append(MeasurementRecord(timestamp=1, diff=0, sync=False, name="m"))
        second = store.append(MeasurementRecord(timestamp=2, diff=1, sync=False, name="m"))
        assert first.sync is True
        assert second.sync is False
        with pytest.raises(StorageError):
            store.append(MeasurementRecord(timestamp=2, diff=1, sync=False, name="m"))

    def test_configured_error(self) -> None:
        store = MemoryMeasurementStore(error=StorageError("read-only"))
        with pytest.raises(StorageError, match="read-only"):
            store.append(MeasurementRecord(timestamp=1, diff=0, sync=False, name="m"))


class TestMakeSettings:
    def test_defaults(self) -> None:
        settings = make_settings()
        assert isinstance(settings, IsolatedSettings)
        assert settings.name == "main"
        assert settings.data == "watch.sqlite"

    def test_ignores_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WATCHDRIFT_NAME", "from-env")
        assert make_settings().name == "main"

    def test_overrides(self) -> None:
        assert make_settings(name="speedmaster", sync=True).sync is True


class TestPluginFixtures:
    """Technique: Fixture Injection."""

    def test_fake_clock_fixture(self, fake_clock: FakeClock) -> None:
        assert fake_clock.now() == 0.0

    def test_fake_reference_fixture(self, fake_reference: FakeReferenceClock) -> None:
        assert fake_reference.fetch("x", 1.0) == ReferenceTimestamp(seconds=960)

    def test_scripted_input_shares_clock(
        self, scripted_input: ScriptedInputSource, fake_clock: FakeClock
    ) -> None:
        scripted_input.poll(0.5)
        assert fake_clock.now() == 0.5

    def test_measurement_store_fixture(self, measurement_store: MeasurementStore) -> None:
        assert measurement_store.count() == 0
