"""Pytest plugin providing shared watchdrift fixtures.

Registered through the ``pytest11`` entry point, so suites that depend
on watchdrift get ``fake_clock``, ``fake_reference``,
``scripted_input`` and ``measurement_store`` without a conftest import.

Imports happen inside the fixtures so that plugin discovery does not
import watchdrift before coverage tracing starts.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from watchdrift._store import MeasurementStore
    from watchdrift.testing._clock import FakeClock
    from watchdrift.testing._fakes import FakeReferenceClock, ScriptedInputSource


@pytest.fixture
def fake_clock() -> FakeClock:
    """FakeClock starting at time 0."""
    from watchdrift.testing._clock import FakeClock

    return FakeClock()


@pytest.fixture
def fake_reference() -> FakeReferenceClock:
    """Reference clock answering ``(seconds=960, fraction=0)``, second 0 of a minute."""
    from watchdrift._reference import ReferenceTimestamp
    from watchdrift.testing._fakes import FakeReferenceClock

    return FakeReferenceClock(timestamp=ReferenceTimestamp(seconds=960))


@pytest.fixture
def scripted_input(fake_clock: FakeClock) -> ScriptedInputSource:
    """Input source with an empty script, bound to ``fake_clock``."""
    from watchdrift.testing._fakes import ScriptedInputSource

    return ScriptedInputSource(fake_clock)


@pytest.fixture
def measurement_store(tmp_path: Path) -> MeasurementStore:
    """SQLite store in a fresh temporary directory."""
    from watchdrift._store import MeasurementStore

    return MeasurementStore(tmp_path / "watch.sqlite")
