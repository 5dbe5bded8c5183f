"""Durable measurement log in SQLite.

One table, keyed by the capture instant::

    measurements(
        ts      INTEGER PRIMARY KEY,   -- seconds since the Unix epoch
        diff    INTEGER NOT NULL,      -- drift, positive = watch fast
        sync    BOOLEAN,               -- trusted calibration point
        name    TEXT NOT NULL,         -- watch identifier
        comment TEXT NULL
    )

The table is created on first access.  The very first row of a store
is always written with ``sync = 1`` so every history starts from a
trusted baseline.  Rows are never updated; a second row for the same
``ts`` is a :class:`StorageError`.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol, runtime_checkable

from watchdrift._errors import StorageError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS measurements (
    ts INTEGER PRIMARY KEY,
    diff INTEGER NOT NULL,
    sync BOOLEAN,
    name TEXT NOT NULL,
    comment TEXT NULL
)
"""


@dataclass(frozen=True, slots=True)
class MeasurementRecord:
    """One persisted drift sample."""

    timestamp: int
    diff: int
    sync: bool
    name: str
    comment: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name is required")


@runtime_checkable
class MeasurementSink(Protocol):
    """Anything that can persist a record."""

    def append(self, record: MeasurementRecord) -> MeasurementRecord:
        """Persist *record*; return it as stored.

        Raises:
            StorageError: The record could not be written.
        """
        ...


class MeasurementStore:
    """:class:`MeasurementSink` backed by a SQLite file.

    Each call opens its own short-lived connection; the tool writes at
    most one row per process, so nothing is held open between calls.

    Args:
        path: Database file.  Missing parent directories are created.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Cannot open {self.path}: {exc}") from exc

        with closing(conn):
            try:
                conn.execute(_SCHEMA)
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot initialise {self.path}: {exc}") from exc
            yield conn

    def append(self, record: MeasurementRecord) -> MeasurementRecord:
        """Insert *record*, forcing ``sync`` on the first row of the store."""
        with self._connect() as conn:
            try:
                (existing,) = conn.execute("SELECT COUNT(*) FROM measurements").fetchone()
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot count measurements: {exc}") from exc

            if existing == 0 and not record.sync:
                logger.info("First measurement in %s, marking it as sync", self.path)
                record = replace(record, sync=True)

            try:
                with conn:
                    conn.execute(
                        "INSERT INTO measurements (ts, diff, sync, name, comment) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (
                            record.timestamp,
                            record.diff,
                            record.sync,
                            record.name,
                            record.comment,
                        ),
                    )
            except sqlite3.IntegrityError as exc:
                raise StorageError(
                    f"A measurement at ts={record.timestamp} already exists: {exc}"
                ) from exc
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot insert measurement: {exc}") from exc

        logger.debug("Stored %s", record)
        return record

    def count(self) -> int:
        with self._connect() as conn:
            try:
                (total,) = conn.execute("SELECT COUNT(*) FROM measurements").fetchone()
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot count measurements: {exc}") from exc
        return int(total)

    def history(
        self, name: str | None = None, limit: int | None = None
    ) -> list[MeasurementRecord]:
        """Stored records in timestamp order, optionally for one watch.

        With *limit*, only the most recent *limit* records are returned
        (still oldest first).
        """
        query = "SELECT ts, diff, sync, name, comment FROM measurements"
        params: list[object] = []
        if name is not None:
            query += " WHERE name = ?"
            params.append(name)
        query += " ORDER BY ts DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._connect() as conn:
            try:
                rows = conn.execute(query, params).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot read measurements: {exc}") from exc

        return [
            MeasurementRecord(
                timestamp=ts, diff=diff, sync=bool(sync), name=row_name, comment=comment
            )
            for ts, diff, sync, row_name, comment in reversed(rows)
        ]
