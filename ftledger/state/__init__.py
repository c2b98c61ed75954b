"""
ftledger.state
==============

In-memory ledger model:

- balances.py:    Balance Ledger (balances + total supply; mint/transfer)
- allowances.py:  Allowance Table (set/increase/decrease/spend)
- minters.py:     Authorization Set (who may mint)
- metadata.py:    immutable token metadata
- ledger.py:      LedgerState aggregate, the unit of persistence
"""

from __future__ import annotations

from .allowances import Allowance, AllowanceTable, AllowanceUpdateOp
from .balances import BalanceLedger
from .ledger import LedgerState
from .metadata import MAX_DECIMALS, Metadata
from .minters import AuthorizedMinters

__all__ = [
    "Allowance",
    "AllowanceTable",
    "AllowanceUpdateOp",
    "AuthorizedMinters",
    "BalanceLedger",
    "LedgerState",
    "MAX_DECIMALS",
    "Metadata",
]
