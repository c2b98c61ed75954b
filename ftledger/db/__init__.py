from __future__ import annotations

"""
ftledger.db
===========

Stores behind the local ledger host, selected by URI:

    sqlite:///path/to/ledger.db   SQLite file (created on first open)
    sqlite:///:memory:            SQLite in memory
    memory://                     dict store, gone when the process exits
    ledger.db                     bare path ending in ".db", same as sqlite:///

>>> kv = open_kv("memory://")
>>> with kv.batch() as b:
...     b.put(b"k", b"v")
>>> kv.get(b"k")
b'v'
"""

from .kv import KV, META_DEPLOYER, Batch, ReadOnlyKV
from .memory import MemoryKV
from .sqlite import SQLiteKV, open_sqlite_kv

_SQLITE_PREFIX = "sqlite:///"
_MEMORY_PREFIX = "memory://"


def open_kv(uri: str, create: bool = True) -> KV:
    """
    Open the store named by `uri`.

    ValueError for an unrecognized URI; FileNotFoundError when `create` is
    False and the SQLite file does not exist.
    """
    target = uri.strip()
    if target.startswith(_MEMORY_PREFIX):
        return MemoryKV()
    if target.startswith(_SQLITE_PREFIX):
        return open_sqlite_kv(target[len(_SQLITE_PREFIX):] or ":memory:", create=create)
    if target.endswith(".db") and "://" not in target:
        return open_sqlite_kv(target, create=create)
    raise ValueError(f"unsupported store URI: {uri!r}")


__all__ = [
    "KV",
    "Batch",
    "ReadOnlyKV",
    "META_DEPLOYER",
    "MemoryKV",
    "SQLiteKV",
    "open_kv",
    "open_sqlite_kv",
]
