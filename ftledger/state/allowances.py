"""
ftledger.state.allowances — the Allowance Table.

owner → (spender → remaining approved amount). Four update modes are selected
explicitly through `AllowanceUpdateOp`:

- SET       overwrite (creates the owner entry if absent)
- INCREASE  checked add, or create with `amount` if absent
- DECREASE  same as SPEND; the owner must already have an entry
- SPEND     the owner must have an entry that names the spender, and the
            remaining amount must cover the spend

INCREASE auto-creates while DECREASE does not; that asymmetry is kept as-is.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from ..address import Address, to_hex
from ..errors import AllowanceTooSmall, NoAllowance
from ..math.safe_uint import u128_add, u128_sub


class AllowanceUpdateOp(str, Enum):
    SET = "set"
    INCREASE = "increase"
    DECREASE = "decrease"
    SPEND = "spend"


class Allowance:
    """Spender map for one owner."""

    __slots__ = ("spenders",)

    def __init__(self, spenders: Optional[Dict[Address, int]] = None) -> None:
        self.spenders: Dict[Address, int] = dict(spenders or {})

    def get(self, spender: Address) -> int:
        return self.spenders.get(spender, 0)

    def set(self, spender: Address, amount: int) -> None:
        self.spenders[spender] = amount

    def increase(self, spender: Address, amount: int) -> None:
        current = self.spenders.get(spender)
        if current is None:
            self.spenders[spender] = amount
        else:
            self.spenders[spender] = u128_add(current, amount)

    def decrease(self, spender: Address, amount: int) -> None:
        self.spend(spender, amount)

    def spend(self, spender: Address, amount: int) -> None:
        current = self.spenders.get(spender)
        if current is None:
            raise NoAllowance(f"no allowance for {to_hex(spender)}", spender=spender)
        if current < amount:
            raise AllowanceTooSmall(spender=spender, allowance=current, needed=amount)
        self.spenders[spender] = u128_sub(current, amount)

    def __len__(self) -> int:
        return len(self.spenders)


class AllowanceTable:
    """All owners' allowances."""

    __slots__ = ("_owners",)

    def __init__(self, owners: Optional[Dict[Address, Dict[Address, int]]] = None) -> None:
        self._owners: Dict[Address, Allowance] = {
            owner: Allowance(spenders) for owner, spenders in (owners or {}).items()
        }

    def allowance(self, owner: Address, spender: Address) -> int:
        entry = self._owners.get(owner)
        return entry.get(spender) if entry is not None else 0

    def has_entry(self, owner: Address) -> bool:
        return owner in self._owners

    def set(self, owner: Address, spender: Address, amount: int) -> None:
        self._owners.setdefault(owner, Allowance()).set(spender, amount)

    def increase(self, owner: Address, spender: Address, amount: int) -> None:
        entry = self._owners.get(owner)
        if entry is None:
            self._owners[owner] = Allowance({spender: amount})
        else:
            entry.increase(spender, amount)

    def decrease(self, owner: Address, spender: Address, amount: int) -> None:
        entry = self._owners.get(owner)
        if entry is None:
            raise NoAllowance("the current allowance is None or zero", owner=owner)
        entry.decrease(spender, amount)

    def spend(self, owner: Address, spender: Address, amount: int) -> None:
        entry = self._owners.get(owner)
        if entry is None:
            raise NoAllowance(
                f"{to_hex(owner)} didn't set allowance for {to_hex(spender)}",
                owner=owner,
                spender=spender,
            )
        entry.spend(spender, amount)

    def update(
        self, op: AllowanceUpdateOp, owner: Address, spender: Address, amount: int
    ) -> None:
        if op is AllowanceUpdateOp.SET:
            self.set(owner, spender, amount)
        elif op is AllowanceUpdateOp.INCREASE:
            self.increase(owner, spender, amount)
        elif op is AllowanceUpdateOp.DECREASE:
            self.decrease(owner, spender, amount)
        elif op is AllowanceUpdateOp.SPEND:
            self.spend(owner, spender, amount)
        else:  # pragma: no cover - exhaustive over the enum
            raise ValueError(f"unknown allowance op: {op!r}")

    def items(self) -> Iterator[Tuple[Address, Dict[Address, int]]]:
        for owner in sorted(self._owners):
            yield owner, dict(sorted(self._owners[owner].spenders.items()))

    def as_dict(self) -> Dict[Address, Dict[Address, int]]:
        return dict(self.items())

    def copy(self) -> "AllowanceTable":
        return AllowanceTable(self.as_dict())


__all__ = ["AllowanceUpdateOp", "Allowance", "AllowanceTable"]
