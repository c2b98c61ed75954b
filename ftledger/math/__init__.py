"""
ftledger.math
=============

Integer-only helpers for ledger amounts. See `safe_uint` for the checked u128
operations used by every balance and allowance mutation.
"""

from __future__ import annotations

from .safe_uint import U128_MAX, is_u128, require_u128, u128_add, u128_sub

__all__ = ["U128_MAX", "is_u128", "require_u128", "u128_add", "u128_sub"]
