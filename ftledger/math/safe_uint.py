# -*- coding: utf-8 -*-
"""
ftledger.math.safe_uint
=======================

Checked unsigned 128-bit arithmetic for ledger amounts.

Conventions
-----------
- All operations are **integer-only**; floats and bools are rejected.
- "checked" variants raise `ArithmeticOverflow` on overflow or underflow and
  never wrap or clamp.
- Inputs are validated to lie in [0, U128_MAX].
"""

from __future__ import annotations

from typing import Any, Final

from ..errors import ArithmeticOverflow, InvalidAmount

U128_MAX: Final[int] = (1 << 128) - 1


def is_u128(x: Any) -> bool:
    """True iff `x` is a plain int in [0, U128_MAX]."""
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U128_MAX


def require_u128(x: Any, field: str = "amount") -> int:
    """Return `x` unchanged, or raise InvalidAmount if it is not a u128."""
    if not is_u128(x):
        raise InvalidAmount(field=field, value=repr(x))
    return x


def u128_add(x: int, y: int) -> int:
    """Checked add: raise on overflow."""
    s = require_u128(x, "lhs") + require_u128(y, "rhs")
    if s > U128_MAX:
        raise ArithmeticOverflow("u128 addition overflowed", lhs=x, rhs=y)
    return s


def u128_sub(x: int, y: int) -> int:
    """Checked sub: raise on underflow (y > x)."""
    require_u128(x, "lhs")
    require_u128(y, "rhs")
    if y > x:
        raise ArithmeticOverflow("u128 subtraction underflowed", lhs=x, rhs=y)
    return x - y


__all__ = ["U128_MAX", "is_u128", "require_u128", "u128_add", "u128_sub"]
