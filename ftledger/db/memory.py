from __future__ import annotations

"""
In-memory KV store for tests and throwaway runs.

Batches stage writes in a private dict and apply them to the store only on a
clean exit, mirroring the SQLite backend's transaction semantics.
"""

from typing import Dict, List, Optional, Tuple

from .kv import KV, Batch

_DELETED = object()


class MemoryBatch(Batch):
    __slots__ = ("_kv", "_pending")

    def __init__(self, kv: "MemoryKV") -> None:
        self._kv = kv
        self._pending: List[Tuple[bytes, object]] = []

    def __enter__(self) -> "MemoryBatch":
        self._pending = []
        return self

    def put(self, key: bytes, value: bytes) -> None:
        self._pending.append((bytes(key), bytes(value)))

    def delete(self, key: bytes) -> None:
        self._pending.append((bytes(key), _DELETED))

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        if exc_type is None:
            for k, v in self._pending:
                if v is _DELETED:
                    self._kv.delete(k)
                else:
                    self._kv.put(k, v)  # type: ignore[arg-type]
        self._pending = []
        return None


class MemoryKV(KV):
    __slots__ = ("_store",)

    def __init__(self) -> None:
        self._store: Dict[bytes, bytes] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        return self._store.get(bytes(key))

    def has(self, key: bytes) -> bool:
        return bytes(key) in self._store

    def put(self, key: bytes, value: bytes) -> None:
        self._store[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._store.pop(bytes(key), None)

    def batch(self) -> Batch:
        return MemoryBatch(self)

    def close(self) -> None:
        pass


__all__ = ["MemoryKV", "MemoryBatch"]
