"""
ftledger.state.minters — the Authorization Set.

Addresses permitted to mint. Seeded with the deployer at initialization and
extended only by the deployer; there is no removal.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional, Set

from ..address import Address, to_hex
from ..errors import AlreadyAuthorized, Unauthorized
from .balances import Notify, discard


class AuthorizedMinters:
    __slots__ = ("_members", "_notify")

    def __init__(
        self, members: Iterable[Address] = (), *, notify: Optional[Notify] = None
    ) -> None:
        self._members: Set[Address] = set(members)
        self._notify = notify or discard

    def is_authorized_minter(self, address: Address) -> bool:
        return address in self._members

    def add_authorized_minter(
        self, address: Address, *, caller: Address, deployer: Address
    ) -> None:
        if caller != deployer:
            raise Unauthorized(
                "authorized caller can be added by the deployer only", caller=caller
            )
        if address in self._members:
            raise AlreadyAuthorized(address=address)
        self._members.add(address)
        self._notify(f"Authorized caller: {to_hex(address)} has been added successfully")

    def __contains__(self, address: object) -> bool:
        return address in self._members

    def __iter__(self) -> Iterator[Address]:
        return iter(sorted(self._members))

    def __len__(self) -> int:
        return len(self._members)

    def copy(self, *, notify: Optional[Notify] = None) -> "AuthorizedMinters":
        return AuthorizedMinters(self._members, notify=notify)


__all__ = ["AuthorizedMinters"]
