"""Reference time from a network time server.

A single SNTP exchange is delegated to :mod:`ntplib`.  The result is a
:class:`ReferenceTimestamp` in Unix seconds plus a 32-bit binary
fraction, the same split NTP uses on the wire.

Failure mapping:

- no reply within ``timeout`` → :class:`ReferenceTimeoutError`
- name resolution, send/receive or malformed reply → :class:`NetworkError`

There is no retry; the caller aborts the cycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import ntplib

from watchdrift._errors import NetworkError, ReferenceTimeoutError

logger = logging.getLogger(__name__)

NTP_PORT = 123

FRACTION_SCALE = 2**32 - 1
"""A fraction of ``FRACTION_SCALE`` represents one full second."""


@dataclass(frozen=True, slots=True)
class ReferenceTimestamp:
    """Trusted wall-clock instant.

    Attributes:
        seconds: Whole seconds since the Unix epoch.
        fraction: Sub-second part, ``0 .. 2**32 - 1`` spanning one second.
    """

    seconds: int
    fraction: int = 0

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise ValueError(f"seconds must be non-negative, got {self.seconds}")
        if not 0 <= self.fraction <= FRACTION_SCALE:
            raise ValueError(f"fraction out of range: {self.fraction}")

    @property
    def millis(self) -> int:
        """Sub-second part in whole milliseconds, truncated."""
        return self.fraction * 1000 // FRACTION_SCALE

    @classmethod
    def from_unix(cls, value: float) -> ReferenceTimestamp:
        """Split a float Unix time into seconds and a 32-bit fraction."""
        seconds = int(value)
        fraction = min(int((value - seconds) * (FRACTION_SCALE + 1)), FRACTION_SCALE)
        return cls(seconds=seconds, fraction=fraction)

    def as_float(self) -> float:
        return self.seconds + self.fraction / FRACTION_SCALE


def parse_server_address(address: str) -> tuple[str, int]:
    """Split ``"host[:port]"`` into host and port.

    IPv6 literals must be bracketed (``"[::1]:123"``).

    Raises:
        ValueError: Empty host or a port that is not 1-65535.
    """
    address = address.strip()
    if address.startswith("["):
        host, _, rest = address[1:].partition("]")
        port_text = rest[1:] if rest.startswith(":") else ""
    elif address.count(":") == 1:
        host, _, port_text = address.partition(":")
    else:
        host, port_text = address, ""

    if not host:
        raise ValueError(f"Missing host in server address {address!r}")
    if not port_text:
        return host, NTP_PORT
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"Invalid port in server address {address!r}") from None
    if not 1 <= port <= 65535:
        raise ValueError(f"Port out of range in server address {address!r}")
    return host, port


@runtime_checkable
class ReferenceClockPort(Protocol):
    """Capability that yields a trusted timestamp or raises."""

    def fetch(self, server: str, timeout: float) -> ReferenceTimestamp:
        """Query *server* once, waiting at most *timeout* seconds.

        Raises:
            NetworkError: Transport failure or malformed reply.
            ReferenceTimeoutError: No reply in time.
        """
        ...


class NtpReferenceClock:
    """:class:`ReferenceClockPort` backed by :class:`ntplib.NTPClient`.

    Args:
        client: Object with ntplib's ``request(host, version, port,
            timeout)`` signature.  Defaults to a fresh ``NTPClient``;
            tests pass :class:`watchdrift.testing.FakeNtpClient`.
        version: NTP protocol version put in the request.
    """

    def __init__(self, client: Any = None, *, version: int = 3) -> None:
        self._client = client if client is not None else ntplib.NTPClient()
        self._version = version

    def fetch(self, server: str, timeout: float) -> ReferenceTimestamp:
        try:
            host, port = parse_server_address(server)
        except ValueError as exc:
            raise NetworkError(str(exc)) from exc

        try:
            stats = self._client.request(
                host, version=self._version, port=port, timeout=timeout
            )
        except ntplib.NTPException as exc:
            # ntplib reports a socket timeout as "No response received ..."
            if "no response" in str(exc).lower():
                raise ReferenceTimeoutError(
                    f"No response from {server} within {timeout:g}s"
                ) from exc
            raise NetworkError(f"Bad reply from {server}: {exc}") from exc
        except TimeoutError as exc:
            raise ReferenceTimeoutError(
                f"No response from {server} within {timeout:g}s"
            ) from exc
        except OSError as exc:
            raise NetworkError(f"Cannot reach {server}: {exc}") from exc

        logger.debug(
            "Reference from %s: stratum=%s offset=%.3fs delay=%.3fs",
            server,
            getattr(stats, "stratum", "?"),
            getattr(stats, "offset", 0.0),
            getattr(stats, "delay", 0.0),
        )
        return ReferenceTimestamp.from_unix(stats.tx_time)
