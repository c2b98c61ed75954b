from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from ftledger.errors import ArithmeticOverflow, InvalidAmount
from ftledger.math import U128_MAX, is_u128, require_u128, u128_add, u128_sub

u128 = st.integers(min_value=0, max_value=U128_MAX)


def test_bounds():
    assert U128_MAX == 2**128 - 1
    assert is_u128(0) and is_u128(U128_MAX)
    assert not is_u128(-1)
    assert not is_u128(U128_MAX + 1)


@pytest.mark.parametrize("bad", [True, False, 1.0, "1", None, -1, 2**128])
def test_require_u128_rejects(bad):
    with pytest.raises(InvalidAmount):
        require_u128(bad)


def test_add_overflow_at_boundary():
    assert u128_add(U128_MAX - 1, 1) == U128_MAX
    with pytest.raises(ArithmeticOverflow):
        u128_add(U128_MAX, 1)


def test_sub_underflow():
    assert u128_sub(5, 5) == 0
    with pytest.raises(ArithmeticOverflow):
        u128_sub(4, 5)


@given(u128, u128)
def test_add_matches_python_or_raises(a, b):
    if a + b > U128_MAX:
        with pytest.raises(ArithmeticOverflow):
            u128_add(a, b)
    else:
        assert u128_add(a, b) == a + b


@given(u128, u128)
def test_sub_matches_python_or_raises(a, b):
    if b > a:
        with pytest.raises(ArithmeticOverflow):
            u128_sub(a, b)
    else:
        assert u128_sub(a, b) == a - b
