"""
Key-value stores for pool and participant records.

The engine needs exactly two things from storage:
- `load(key)`: the current bytes and version for a key, or None when absent;
- `commit(writes, expected=...)`: write several keys as one atomic unit, but
  only if every key is still at the version the caller loaded (optimistic
  consistency). Version 0 means "must be absent".

A stale version raises `StoreConflict`; driver errors are wrapped as
`StorageFailure`. Nothing here retries.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class StorageFailure(RuntimeError):
    """The backing store failed; propagated to the caller unmodified."""


class StoreConflict(StorageFailure):
    """A key changed between load and commit."""

    def __init__(self, key: str, expected: int, actual: int) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(f"version conflict on {key!r}: expected {expected}, found {actual}")


@dataclass(frozen=True)
class StoredValue:
    data: bytes
    version: int


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[StoredValue]:
        ...

    def commit(self, writes: Mapping[str, bytes], *, expected: Mapping[str, int]) -> None:
        ...


def _check_commit_args(writes: Mapping[str, bytes], expected: Mapping[str, int]) -> None:
    for key, value in writes.items():
        if not isinstance(key, str) or not key:
            raise ValueError("store keys must be non-empty strings")
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"value for {key!r} must be bytes")
        if key not in expected:
            raise ValueError(f"missing expected version for {key!r}")
        v = expected[key]
        if not isinstance(v, int) or isinstance(v, bool) or v < 0:
            raise ValueError(f"expected version for {key!r} must be a non-negative int")


class InMemoryStore:
    """
    Process-local store: dict of key -> (bytes, version).

    Thread-safe via a coarse re-entrant lock.
    """

    def __init__(self) -> None:
        self._data: Dict[str, Tuple[bytes, int]] = {}
        self._lock = threading.RLock()

    def load(self, key: str) -> Optional[StoredValue]:
        with self._lock:
            row = self._data.get(key)
        if row is None:
            return None
        return StoredValue(data=row[0], version=row[1])

    def commit(self, writes: Mapping[str, bytes], *, expected: Mapping[str, int]) -> None:
        _check_commit_args(writes, expected)
        with self._lock:
            for key in writes:
                actual = self._data.get(key, (b"", 0))[1]
                if actual != expected[key]:
                    raise StoreConflict(key, expected[key], actual)
            for key, value in writes.items():
                self._data[key] = (bytes(value), expected[key] + 1)

    def __repr__(self) -> str:
        return f"InMemoryStore({len(self._data)} keys)"


_SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS kv (
    key     TEXT PRIMARY KEY,
    value   BLOB NOT NULL,
    version INTEGER NOT NULL CHECK (version > 0)
);
"""


class SQLiteStore:
    """
    Durable single-file store.

    One connection shared across threads behind a process lock; cross-process
    writers are serialized by `BEGIN IMMEDIATE` and detected by the version
    check.
    """

    def __init__(self, path: str) -> None:
        if not isinstance(path, str) or not path:
            raise ValueError("path must be a non-empty string")
        self._path = path
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(
                path,
                timeout=30.0,
                isolation_level=None,
                check_same_thread=False,
            )
            self._conn.execute("PRAGMA busy_timeout=30000")
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._migrate()
        except sqlite3.Error as exc:
            raise StorageFailure(f"cannot open store at {path!r}: {exc}") from exc

    def _migrate(self) -> None:
        with self._lock:
            ver = self._conn.execute("PRAGMA user_version").fetchone()[0]
            if ver == 0:
                self._conn.executescript(_SCHEMA_V1)
                self._conn.execute("PRAGMA user_version=1")
                logger.info("initialized store schema at %s", self._path)

    @contextmanager
    def _txn(self) -> Iterator[sqlite3.Connection]:
        conn = self._conn
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
            conn.execute("COMMIT")
        except BaseException:
            # A failed COMMIT can leave the transaction open; close it so the
            # rejected writes stay invisible and the connection stays usable.
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error as exc:
                logger.error("rollback failed on %s: %s", self._path, exc)
            raise

    def load(self, key: str) -> Optional[StoredValue]:
        try:
            with self._lock:
                row = self._conn.execute("SELECT value, version FROM kv WHERE key=?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StorageFailure(f"load {key!r} failed: {exc}") from exc
        if row is None:
            return None
        return StoredValue(data=bytes(row[0]), version=int(row[1]))

    def commit(self, writes: Mapping[str, bytes], *, expected: Mapping[str, int]) -> None:
        _check_commit_args(writes, expected)
        try:
            with self._lock, self._txn() as conn:
                for key in writes:
                    row = conn.execute("SELECT version FROM kv WHERE key=?", (key,)).fetchone()
                    actual = int(row[0]) if row else 0
                    if actual != expected[key]:
                        raise StoreConflict(key, expected[key], actual)
                for key, value in writes.items():
                    conn.execute(
                        "INSERT INTO kv(key, value, version) VALUES(?,?,?) "
                        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, version=excluded.version",
                        (key, bytes(value), expected[key] + 1),
                    )
        except sqlite3.Error as exc:
            raise StorageFailure(f"commit failed: {exc}") from exc

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __repr__(self) -> str:
        return f"SQLiteStore({self._path!r})"
