"""
ftledger.state.balances — the Balance Ledger.

Address → u128 balance map plus the single total-supply counter. Every
mutation computes all of its checked results *before* writing any of them, so
a raised error leaves the ledger exactly as it was.

Invariant (by construction): sum(balances) == total_supply.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterator, Optional, Tuple

from ..address import Address, to_hex
from ..errors import InsufficientBalance, InvalidOperation
from ..math.safe_uint import u128_add, u128_sub

Notify = Callable[[str], None]


def discard(_text: str) -> None:
    """No-op notice sink for components built outside a LedgerState."""


class BalanceLedger:
    """Balances and total supply."""

    __slots__ = ("_balances", "_total_supply", "_notify")

    def __init__(
        self,
        balances: Optional[Dict[Address, int]] = None,
        total_supply: int = 0,
        *,
        notify: Optional[Notify] = None,
    ) -> None:
        self._balances: Dict[Address, int] = dict(balances or {})
        self._total_supply = total_supply
        self._notify = notify or discard

    # ---- views ---- #

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: Address) -> int:
        return self._balances.get(account, 0)

    def has_balance(self, account: Address) -> bool:
        return self.balance_of(account) != 0

    def items(self) -> Iterator[Tuple[Address, int]]:
        return iter(sorted(self._balances.items()))

    def total(self) -> int:
        """Sum of all balances (for invariant checks)."""
        return sum(self._balances.values())

    def __len__(self) -> int:
        return len(self._balances)

    # ---- seeding ---- #

    def seed(self, account: Address, amount: int) -> None:
        """Set an initial holder balance; used once by initialization."""
        total = u128_add(self._total_supply, amount)
        self._balances[account] = amount
        self._total_supply = total
        self._notify(f"Initial balance of {amount} tokens for {to_hex(account)}")

    # ---- mutations ---- #

    def mint(self, recipient: Address, amount: int) -> None:
        total = u128_add(self._total_supply, amount)
        credited = u128_add(self.balance_of(recipient), amount)

        self._total_supply = total
        self._balances[recipient] = credited
        self._notify(f"Minted {amount} tokens for {to_hex(recipient)}")

    def transfer(self, sender: Address, recipient: Address, amount: int) -> None:
        if sender == recipient:
            raise InvalidOperation("self transfer is not allowed", account=sender)
        sender_balance = self.balance_of(sender)
        if sender_balance < amount:
            raise InsufficientBalance(
                account=sender, balance=sender_balance, needed=amount
            )
        debited = u128_sub(sender_balance, amount)
        credited = u128_add(self.balance_of(recipient), amount)

        self._balances[sender] = debited
        self._balances[recipient] = credited
        self._notify(
            f"Transferred {amount} tokens from {to_hex(sender)} to {to_hex(recipient)}"
        )

    def copy(self, *, notify: Optional[Notify] = None) -> "BalanceLedger":
        return BalanceLedger(self._balances, self._total_supply, notify=notify)


__all__ = ["BalanceLedger", "Notify", "discard"]
