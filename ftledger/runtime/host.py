"""
ftledger.runtime.host — the boundary between the ledger and its environment.

The ledger never reaches for globals: everything it needs from the outside
world comes through a `Host`:

- current_caller()      identity invoking the current operation
- deployer_address()    identity that deployed the ledger
- store_read(key)       persisted bytes under key, or None
- store_write(key, v)   persist bytes under key
- emit_notice(text)     publish a human-readable notice (best-effort)

`KVHost` is the concrete host used by the CLI and the tests. It persists into
any `ftledger.db.KV` backend and keeps notices in a `NoticeLog`.

    kv = open_kv("memory://")
    host = KVHost(kv, deployer=alice, caller=alice)
    token = FungibleToken(host)
    with host.as_caller(bob):
        token.transfer(carol, 5)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Protocol, runtime_checkable

from ..address import Address, AddressLike, to_address, to_hex
from ..db import KV, META_DEPLOYER, open_kv
from ..errors import ConfigError
from ..logging import get_logger
from .notices import NoticeLog

log = get_logger("ftledger.runtime.host")


@runtime_checkable
class Host(Protocol):
    def current_caller(self) -> Address: ...
    def deployer_address(self) -> Address: ...
    def store_read(self, key: bytes) -> Optional[bytes]: ...
    def store_write(self, key: bytes, value: bytes) -> None: ...
    def emit_notice(self, text: str) -> None: ...


class KVHost:
    """
    Host over a KV backend.

    The caller starts as `caller` (or the deployer when omitted) and can be
    switched for a block with `as_caller`.
    """

    def __init__(
        self,
        kv: KV,
        *,
        deployer: AddressLike,
        caller: Optional[AddressLike] = None,
    ) -> None:
        self.kv = kv
        self._deployer = to_address(deployer)
        self._caller = to_address(caller) if caller is not None else self._deployer
        self.notices = NoticeLog()

    # ---- construction ---- #

    @classmethod
    def open(
        cls,
        uri: str,
        *,
        deployer: Optional[AddressLike] = None,
        caller: Optional[AddressLike] = None,
    ) -> "KVHost":
        """
        Open the store at `uri`. The deployer is read from the store; passing
        `deployer` records it on first open and must match on later opens.
        """
        kv = open_kv(uri)
        stored = kv.get(META_DEPLOYER)
        if deployer is not None:
            addr = to_address(deployer)
            if stored is None:
                with kv.batch() as b:
                    b.put(META_DEPLOYER, addr)
                log.info("recorded deployer", extra={"deployer": to_hex(addr), "db": uri})
                stored = addr
            elif stored != addr:
                kv.close()
                raise ConfigError(
                    "store was deployed by a different address",
                    stored=stored,
                    given=addr,
                )
        if stored is None:
            kv.close()
            raise ConfigError("store has no deployer; run `deploy` first", db=uri)
        return cls(kv, deployer=stored, caller=caller)

    def close(self) -> None:
        self.kv.close()

    def __enter__(self) -> "KVHost":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---- caller identity ---- #

    @contextmanager
    def as_caller(self, caller: AddressLike) -> Iterator["KVHost"]:
        prev = self._caller
        self._caller = to_address(caller)
        try:
            yield self
        finally:
            self._caller = prev

    def set_caller(self, caller: AddressLike) -> None:
        self._caller = to_address(caller)

    # ---- Host protocol ---- #

    def current_caller(self) -> Address:
        return self._caller

    def deployer_address(self) -> Address:
        return self._deployer

    def store_read(self, key: bytes) -> Optional[bytes]:
        return self.kv.get(key)

    def store_write(self, key: bytes, value: bytes) -> None:
        with self.kv.batch() as b:
            b.put(key, value)

    def emit_notice(self, text: str) -> None:
        self.notices.append(text)


__all__ = ["Host", "KVHost"]
