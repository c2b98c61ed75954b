from __future__ import annotations

"""
SQLite store for the ledger host.

One table, `ledger_kv(key BLOB PRIMARY KEY, value BLOB NOT NULL)`. File
databases run in WAL mode. A batch stages its writes in memory and flushes
them inside a single `BEGIN IMMEDIATE` transaction when the block exits
cleanly; if the block raises, nothing reaches the database.
"""

import os
import sqlite3
from typing import Dict, Iterable, Optional, Tuple, Union

from .kv import KV, Batch

PathLike = Union[str, "os.PathLike[str]"]

TABLE = "ledger_kv"

_PRAGMAS: Tuple[Tuple[str, str], ...] = (
    ("journal_mode", "WAL"),
    ("synchronous", "NORMAL"),
    ("foreign_keys", "OFF"),
)

_SQL_GET = f"SELECT value FROM {TABLE} WHERE key = ?"
_SQL_PUT = (
    f"INSERT INTO {TABLE}(key, value) VALUES(?, ?) "
    "ON CONFLICT(key) DO UPDATE SET value = excluded.value"
)
_SQL_DEL = f"DELETE FROM {TABLE} WHERE key = ?"


def _setup(conn: sqlite3.Connection, extra: Optional[Dict[str, str]]) -> None:
    for name, value in _PRAGMAS + tuple((extra or {}).items()):
        conn.execute(f"PRAGMA {name}={value}")
    conn.execute(
        f"CREATE TABLE IF NOT EXISTS {TABLE} (key BLOB PRIMARY KEY, value BLOB NOT NULL)"
    )


class SQLiteBatch(Batch):
    """Staged writes; `None` marks a delete."""

    def __init__(self, store: "SQLiteKV") -> None:
        self._store = store
        self._staged: Dict[bytes, Optional[bytes]] = {}

    def __enter__(self) -> "SQLiteBatch":
        self._staged = {}
        return self

    def put(self, key: bytes, value: bytes) -> None:
        self._staged[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._staged[bytes(key)] = None

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        staged, self._staged = self._staged, {}
        if exc_type is None and staged:
            self._store._apply(staged.items())
        return None


class SQLiteKV(KV):
    """KV over a single SQLite connection. Build with `open_sqlite_kv`."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _apply(self, writes: Iterable[Tuple[bytes, Optional[bytes]]]) -> None:
        conn = self._conn
        conn.execute("BEGIN IMMEDIATE")
        try:
            for key, value in writes:
                if value is None:
                    conn.execute(_SQL_DEL, (key,))
                else:
                    conn.execute(_SQL_PUT, (key, value))
        except Exception:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def get(self, key: bytes) -> Optional[bytes]:
        row = self._conn.execute(_SQL_GET, (bytes(key),)).fetchone()
        return None if row is None else bytes(row[0])

    def has(self, key: bytes) -> bool:
        return self.get(key) is not None

    def put(self, key: bytes, value: bytes) -> None:
        self._apply([(bytes(key), bytes(value))])

    def delete(self, key: bytes) -> None:
        self._apply([(bytes(key), None)])

    def batch(self) -> Batch:
        return SQLiteBatch(self)

    def close(self) -> None:
        self._conn.close()


def open_sqlite_kv(
    path: PathLike, *, pragmas: Optional[Dict[str, str]] = None, create: bool = True
) -> SQLiteKV:
    """
    Open the store at `path` (":memory:" for a throwaway database).
    `create=False` raises FileNotFoundError when the file is missing.
    """
    target = os.fspath(path)
    if not create and target != ":memory:" and not os.path.exists(target):
        raise FileNotFoundError(f"ledger store not found: {target}")
    # Autocommit mode; `_apply` opens its own transaction.
    conn = sqlite3.connect(target, isolation_level=None, check_same_thread=False)
    _setup(conn, pragmas)
    return SQLiteKV(conn)


__all__ = ["SQLiteKV", "SQLiteBatch", "open_sqlite_kv"]
