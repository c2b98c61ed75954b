"""
ftledger.state.ledger — the Ledger State aggregate.

`LedgerState` owns the metadata, Balance Ledger, Allowance Table and
Authorization Set. It is the unit of persistence: the dispatch layer loads one,
mutates it in memory and writes the whole record back only if the call
succeeded.

Notices produced by the sub-components are queued on `notices`; they are not
part of the persisted record and are published by the caller after commit.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from ..address import Address
from ..errors import InvalidMetadata, LengthMismatch, StateCorrupt, StateInvariant
from ..math.safe_uint import U128_MAX, require_u128
from .allowances import AllowanceTable
from .balances import BalanceLedger
from .metadata import MAX_DECIMALS, Metadata
from .minters import AuthorizedMinters


class LedgerState:
    __slots__ = ("metadata", "balances", "allowances", "minters", "notices")

    def __init__(
        self,
        metadata: Metadata,
        balances: BalanceLedger,
        allowances: AllowanceTable,
        minters: AuthorizedMinters,
    ) -> None:
        self.metadata = metadata
        self.notices: List[str] = []
        # Own private copies; notices land on this state's queue.
        self.balances = balances.copy(notify=self.notices.append)
        self.allowances = allowances.copy()
        self.minters = minters.copy(notify=self.notices.append)

    # ---- lifecycle ---- #

    @classmethod
    def create(
        cls,
        metadata: Metadata,
        deployer: Address,
        account_ids: Sequence[Address],
        amounts: Sequence[int],
        *,
        max_decimals: int = MAX_DECIMALS,
    ) -> "LedgerState":
        """
        Build the initial state. Duplicate accounts keep their *first* amount;
        later entries for the same account are ignored, not summed.
        """
        metadata.validate(max_decimals)
        if len(account_ids) != len(amounts):
            raise LengthMismatch(accounts=len(account_ids), amounts=len(amounts))

        state = cls(
            metadata,
            BalanceLedger(),
            AllowanceTable(),
            AuthorizedMinters([deployer]),
        )
        seen = set()
        for account, amount in zip(account_ids, amounts):
            require_u128(amount)
            if account in seen:
                continue
            seen.add(account)
            state.balances.seed(account, amount)
        return state

    def copy(self) -> "LedgerState":
        return LedgerState(self.metadata, self.balances, self.allowances, self.minters)

    # ---- invariants ---- #

    @property
    def total_supply(self) -> int:
        return self.balances.total_supply

    def check_invariants(self) -> None:
        """Raise StateInvariant if the conservation law or ranges are broken."""
        total = self.balances.total()
        if total != self.balances.total_supply:
            raise StateInvariant(
                "sum of balances differs from total supply",
                sum=total,
                total_supply=self.balances.total_supply,
            )
        if not 0 <= self.balances.total_supply <= U128_MAX:
            raise StateInvariant("total supply out of u128 range")

    # ---- record form (for the codec) ---- #

    def to_record(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata.to_dict(),
            "balances": dict(self.balances.items()),
            "allowances": self.allowances.as_dict(),
            "total_supply": self.balances.total_supply,
            "minters": list(self.minters),
        }

    @classmethod
    def from_record(cls, rec: Any) -> "LedgerState":
        if not isinstance(rec, dict):
            raise StateCorrupt("state record must be a map")
        try:
            metadata = Metadata.from_dict(rec["metadata"]).validate()
        except InvalidMetadata as e:
            raise StateCorrupt(f"malformed metadata: {e.message}") from e
        except (KeyError, TypeError) as e:
            raise StateCorrupt(f"malformed state record: {e}") from e
        try:
            balances = _u128_map(rec["balances"], "balances")
            allowances = {
                _addr(owner, "allowances"): _u128_map(spenders, "allowances")
                for owner, spenders in dict(rec["allowances"]).items()
            }
            total_supply = rec["total_supply"]
            minters = [_addr(m, "minters") for m in rec["minters"]]
        except (KeyError, TypeError, ValueError) as e:
            raise StateCorrupt(f"malformed state record: {e}") from e
        if not isinstance(total_supply, int) or not 0 <= total_supply <= U128_MAX:
            raise StateCorrupt("total_supply out of range")
        held = sum(balances.values())
        if held != total_supply:
            raise StateCorrupt(
                "sum of balances differs from total_supply",
                sum=held,
                total_supply=total_supply,
            )

        return cls(
            metadata,
            BalanceLedger(balances, total_supply),
            AllowanceTable(allowances),
            AuthorizedMinters(minters),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LedgerState):
            return NotImplemented
        return self.to_record() == other.to_record()


def _addr(v: Any, where: str) -> Address:
    if not isinstance(v, bytes):
        raise StateCorrupt(f"{where}: address must be bytes")
    return v


def _u128_map(m: Any, where: str) -> Dict[Address, int]:
    out: Dict[Address, int] = {}
    for k, v in dict(m).items():
        if not isinstance(v, int) or isinstance(v, bool) or not 0 <= v <= U128_MAX:
            raise StateCorrupt(f"{where}: value out of u128 range")
        out[_addr(k, where)] = v
    return out


__all__ = ["LedgerState"]
