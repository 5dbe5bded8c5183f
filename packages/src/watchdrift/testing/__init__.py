"""Public test-support utilities for watchdrift.

Deterministic doubles for every capability the engine talks to, so
cycles can be exercised without a network, a terminal or a display:

- :class:`FakeClock`: manually advanced monotonic clock.
- :class:`FakeNtpClient`: stands in for ``ntplib.NTPClient``.
- :class:`FakeReferenceClock`: canned reference timestamps or failures.
- :class:`ScriptedInputSource`: replays operator input events.
- :class:`FakeFrontEnd`: canned capture result and minute choice.
- :class:`MemoryMeasurementStore`: in-memory append log.
- :func:`make_settings`: ``Settings`` without env vars or ``.env``.
"""

from watchdrift.testing._clock import FakeClock
from watchdrift.testing._fakes import (
    FakeFrontEnd,
    FakeNtpClient,
    FakeReferenceClock,
    MemoryMeasurementStore,
    ScriptedInputSource,
)
from watchdrift.testing._settings import IsolatedSettings, make_settings

__all__ = [
    "FakeClock",
    "FakeFrontEnd",
    "FakeNtpClient",
    "FakeReferenceClock",
    "IsolatedSettings",
    "MemoryMeasurementStore",
    "ScriptedInputSource",
    "make_settings",
]
