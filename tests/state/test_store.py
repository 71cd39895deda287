from __future__ import annotations

import sqlite3
import threading

import pytest

from stakepool.state.store import InMemoryStore, SQLiteStore, StorageFailure, StoreConflict, StoredValue


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryStore()
        return
    s = SQLiteStore(str(tmp_path / "pool.db"))
    yield s
    s.close()


def test_load_absent_key(store) -> None:
    assert store.load("pool") is None


def test_create_then_update(store) -> None:
    store.commit({"pool": b"a"}, expected={"pool": 0})
    assert store.load("pool") == StoredValue(data=b"a", version=1)

    store.commit({"pool": b"b"}, expected={"pool": 1})
    assert store.load("pool") == StoredValue(data=b"b", version=2)


def test_create_conflicts_when_present(store) -> None:
    store.commit({"pool": b"a"}, expected={"pool": 0})
    with pytest.raises(StoreConflict) as ei:
        store.commit({"pool": b"b"}, expected={"pool": 0})
    assert ei.value.key == "pool"
    assert ei.value.expected == 0
    assert ei.value.actual == 1


def test_multi_key_commit_is_all_or_nothing(store) -> None:
    store.commit({"pool": b"p1", "participant/a": b"a1"}, expected={"pool": 0, "participant/a": 0})
    # Second key is stale: neither write may land.
    with pytest.raises(StoreConflict):
        store.commit(
            {"pool": b"p2", "participant/a": b"a2"},
            expected={"pool": 1, "participant/a": 0},
        )
    assert store.load("pool") == StoredValue(data=b"p1", version=1)
    assert store.load("participant/a") == StoredValue(data=b"a1", version=1)


def test_conflict_is_a_storage_failure(store) -> None:
    store.commit({"k": b"v"}, expected={"k": 0})
    with pytest.raises(StorageFailure):
        store.commit({"k": b"w"}, expected={"k": 5})


def test_commit_requires_expected_version(store) -> None:
    with pytest.raises(ValueError, match="expected version"):
        store.commit({"k": b"v"}, expected={})


def test_commit_rejects_non_bytes(store) -> None:
    with pytest.raises(TypeError):
        store.commit({"k": "v"}, expected={"k": 0})  # type: ignore[dict-item]


def test_concurrent_creators_only_one_wins(store) -> None:
    winners: list[int] = []
    conflicts: list[int] = []

    def create(i: int) -> None:
        try:
            store.commit({"pool": str(i).encode()}, expected={"pool": 0})
        except StoreConflict:
            conflicts.append(i)
        else:
            winners.append(i)

    threads = [threading.Thread(target=create, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(winners) == 1
    assert len(conflicts) == 7
    assert store.load("pool").version == 1


def test_sqlite_persists_across_instances(tmp_path) -> None:
    path = str(tmp_path / "pool.db")
    s1 = SQLiteStore(path)
    s1.commit({"pool": b"x"}, expected={"pool": 0})
    s1.close()

    s2 = SQLiteStore(path)
    try:
        assert s2.load("pool") == StoredValue(data=b"x", version=1)
    finally:
        s2.close()


class _CommitFailsOnce:
    """Connection wrapper whose first COMMIT fails like a full disk would."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self.armed = True

    def execute(self, sql: str, *args):
        if self.armed and sql == "COMMIT":
            self.armed = False
            raise sqlite3.OperationalError("disk I/O error")
        return self._conn.execute(sql, *args)

    def close(self) -> None:
        self._conn.close()


def test_sqlite_failed_commit_rolls_back(tmp_path) -> None:
    s = SQLiteStore(str(tmp_path / "pool.db"))
    s._conn = _CommitFailsOnce(s._conn)  # type: ignore[assignment]
    try:
        with pytest.raises(StorageFailure):
            s.commit({"a": b"1"}, expected={"a": 0})
        assert s.load("a") is None

        s.commit({"b": b"2"}, expected={"b": 0})
        assert s.load("b") == StoredValue(data=b"2", version=1)
        assert s.load("a") is None
    finally:
        s.close()


def test_sqlite_unopenable_path(tmp_path) -> None:
    with pytest.raises(StorageFailure):
        SQLiteStore(str(tmp_path / "missing-dir" / "pool.db"))
