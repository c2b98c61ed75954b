from __future__ import annotations

"""
Storage protocols for the ledger host.

The host keeps two kinds of entries in a store:

- <state_key>     the framed ledger record (see ftledger.encoding)
- META_DEPLOYER   the deployer address recorded by `deploy`

Writes go through `batch()`: everything put or deleted inside the block lands
together on a clean exit and is dropped if the block raises.

    with kv.batch() as b:
        b.put(state_key, blob)
"""

from typing import Optional, Protocol, runtime_checkable

META_DEPLOYER = b"meta:deployer"


@runtime_checkable
class ReadOnlyKV(Protocol):
    def get(self, key: bytes) -> Optional[bytes]: ...
    def has(self, key: bytes) -> bool: ...
    def close(self) -> None: ...


@runtime_checkable
class Batch(Protocol):
    """Context manager collecting writes; applied only on a clean exit."""

    def put(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def __enter__(self) -> "Batch": ...
    def __exit__(self, exc_type, exc, tb) -> Optional[bool]: ...


@runtime_checkable
class KV(ReadOnlyKV, Protocol):
    """Read-write store. `put`/`delete` apply immediately; `delete` of a missing key is a no-op."""

    def put(self, key: bytes, value: bytes) -> None: ...
    def delete(self, key: bytes) -> None: ...
    def batch(self) -> Batch: ...


__all__ = ["ReadOnlyKV", "KV", "Batch", "META_DEPLOYER"]
