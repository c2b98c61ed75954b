"""
Minting, transfers and allowances through FungibleToken.

Every failing call must leave the persisted blob byte-for-byte unchanged and
publish no notice.
"""

from __future__ import annotations

import contextlib

import pytest

from ftledger.errors import (
    AllowanceTooSmall,
    ArithmeticOverflow,
    InsufficientBalance,
    InvalidAddress,
    InvalidAmount,
    InvalidOperation,
    NoAllowance,
    NoBalance,
    Unauthorized,
    ZeroAmount,
)
from ftledger.math import U128_MAX

from .conftest import ALICE, BOB, CAROL, DAVE, GOLD, STATE_KEY


@contextlib.contextmanager
def unchanged(kv, host):
    """Assert the stored blob and the notice log are untouched by the block."""
    before = kv.get(STATE_KEY)
    n = len(host.notices)
    yield
    assert kv.get(STATE_KEY) == before
    assert len(host.notices) == n


# ----------------------------- mint -----------------------------------------


def test_mint_by_deployer(ledger, host):
    ledger.mint(CAROL, 25)
    assert ledger.balance_of(CAROL) == 25
    assert ledger.total_supply() == 175
    assert host.notices.texts() == [f"Minted 25 tokens for 0x{CAROL.hex()}"]


def test_unauthorized_mint(ledger, host, kv):
    with unchanged(kv, host), host.as_caller(CAROL):
        with pytest.raises(Unauthorized):
            ledger.mint(CAROL, 10)
    assert ledger.balance_of(CAROL) == 0
    assert ledger.total_supply() == 150


def test_unauthorized_checked_before_zero_amount(ledger, host):
    with host.as_caller(CAROL):
        with pytest.raises(Unauthorized):
            ledger.mint(CAROL, 0)


def test_mint_zero(ledger, host, kv):
    with unchanged(kv, host):
        with pytest.raises(ZeroAmount):
            ledger.mint(CAROL, 0)


def test_mint_overflow_boundary(token, host, kv):
    token.initialize(GOLD, [ALICE], [U128_MAX])
    with unchanged(kv, host):
        with pytest.raises(ArithmeticOverflow):
            token.mint(BOB, 1)
    assert token.total_supply() == U128_MAX
    assert token.balance_of(BOB) == 0


@pytest.mark.parametrize("amount", [-1, U128_MAX + 1, 1.5, True, "10"])
def test_mint_rejects_non_u128(ledger, host, kv, amount):
    with unchanged(kv, host):
        with pytest.raises(InvalidAmount):
            ledger.mint(CAROL, amount)


# ----------------------------- transfer -------------------------------------


def test_transfer(ledger, host):
    ledger.transfer(CAROL, 30)
    assert ledger.balance_of(ALICE) == 70
    assert ledger.balance_of(CAROL) == 30
    assert ledger.total_supply() == 150
    assert host.notices.texts() == [
        f"Transferred 30 tokens from 0x{ALICE.hex()} to 0x{CAROL.hex()}"
    ]


def test_transfer_whole_balance(ledger, host):
    with host.as_caller(BOB):
        ledger.transfer(ALICE, 50)
    assert ledger.balance_of(BOB) == 0
    assert ledger.balance_of(ALICE) == 150


def test_transfer_to_self_rejected_regardless_of_balance(ledger, host, kv):
    with unchanged(kv, host):
        with pytest.raises(InvalidOperation):
            ledger.transfer(ALICE, 1)
        with host.as_caller(CAROL):
            with pytest.raises(InvalidOperation):
                ledger.transfer(CAROL, 1)


def test_transfer_insufficient(ledger, host, kv):
    with unchanged(kv, host), host.as_caller(BOB):
        with pytest.raises(InsufficientBalance):
            ledger.transfer(CAROL, 51)


def test_transfer_zero(ledger, host, kv):
    with unchanged(kv, host):
        with pytest.raises(ZeroAmount):
            ledger.transfer(BOB, 0)


def test_transfer_bad_recipient(ledger, host, kv):
    with unchanged(kv, host):
        with pytest.raises(InvalidAddress):
            ledger.transfer("0x1234", 1)


# ----------------------------- approve / transfer_from ----------------------


def test_approve_and_transfer_from_exhausts_allowance(ledger, host, kv):
    ledger.approve(BOB, 40)
    assert ledger.allowance(ALICE, BOB) == 40

    with host.as_caller(BOB):
        ledger.transfer_from(ALICE, CAROL, 40)
    assert ledger.balance_of(ALICE) == 60
    assert ledger.balance_of(CAROL) == 40
    assert ledger.allowance(ALICE, BOB) == 0

    with unchanged(kv, host), host.as_caller(BOB):
        with pytest.raises(AllowanceTooSmall):
            ledger.transfer_from(ALICE, CAROL, 1)


def test_transfer_from_without_allowance(ledger, host, kv):
    with unchanged(kv, host), host.as_caller(CAROL):
        with pytest.raises(NoAllowance):
            ledger.transfer_from(ALICE, DAVE, 1)


def test_transfer_from_spender_not_listed(ledger, host, kv):
    ledger.approve(BOB, 10)
    with unchanged(kv, host), host.as_caller(CAROL):
        with pytest.raises(NoAllowance):
            ledger.transfer_from(ALICE, DAVE, 1)


def test_transfer_from_insufficient_owner_balance_restores_allowance(ledger, host, kv):
    with host.as_caller(BOB):
        ledger.approve(CAROL, 100)
    with unchanged(kv, host), host.as_caller(CAROL):
        with pytest.raises(InsufficientBalance):
            ledger.transfer_from(BOB, DAVE, 60)
    assert ledger.allowance(BOB, CAROL) == 100


def test_transfer_from_zero(ledger, host, kv):
    ledger.approve(BOB, 10)
    with unchanged(kv, host), host.as_caller(BOB):
        with pytest.raises(ZeroAmount):
            ledger.transfer_from(ALICE, CAROL, 0)
    assert ledger.allowance(ALICE, BOB) == 10


def test_transfer_from_owner_to_self_rejected(ledger, host, kv):
    ledger.approve(BOB, 10)
    with unchanged(kv, host), host.as_caller(BOB):
        with pytest.raises(InvalidOperation):
            ledger.transfer_from(ALICE, ALICE, 5)
    assert ledger.allowance(ALICE, BOB) == 10


def test_approve_overwrites_and_allows_zero(ledger):
    ledger.approve(BOB, 40)
    ledger.approve(BOB, 5)
    assert ledger.allowance(ALICE, BOB) == 5
    ledger.approve(BOB, 0)
    assert ledger.allowance(ALICE, BOB) == 0


def test_approve_self(ledger, host, kv):
    with unchanged(kv, host):
        with pytest.raises(InvalidOperation):
            ledger.approve(ALICE, 1)


def test_approve_without_balance(ledger, host, kv):
    with unchanged(kv, host), host.as_caller(CAROL):
        with pytest.raises(NoBalance):
            ledger.approve(BOB, 1)


def test_approve_does_not_publish_notice(ledger, host):
    ledger.approve(BOB, 1)
    assert len(host.notices) == 0


# ----------------------------- increase / decrease --------------------------


def test_increase_then_decrease_restores(ledger):
    ledger.approve(BOB, 10)
    ledger.increase_allowance(BOB, 5)
    assert ledger.allowance(ALICE, BOB) == 15
    ledger.decrease_allowance(BOB, 5)
    assert ledger.allowance(ALICE, BOB) == 10


def test_decrease_below_zero(ledger, host, kv):
    ledger.approve(BOB, 10)
    with unchanged(kv, host):
        with pytest.raises(AllowanceTooSmall):
            ledger.decrease_allowance(BOB, 11)
    assert ledger.allowance(ALICE, BOB) == 10


def test_increase_creates_but_decrease_requires_entry(ledger, host):
    # increase_allowance creates the owner entry; decrease_allowance does not.
    with host.as_caller(BOB):
        with pytest.raises(NoAllowance):
            ledger.decrease_allowance(CAROL, 1)
        ledger.increase_allowance(CAROL, 3)
        assert ledger.allowance(BOB, CAROL) == 3
        ledger.decrease_allowance(CAROL, 3)
        assert ledger.allowance(BOB, CAROL) == 0


@pytest.mark.parametrize("op", ["increase_allowance", "decrease_allowance"])
def test_allowance_changes_reject_zero(ledger, host, kv, op):
    ledger.approve(BOB, 10)
    with unchanged(kv, host):
        with pytest.raises(ZeroAmount):
            getattr(ledger, op)(BOB, 0)


@pytest.mark.parametrize("op", ["increase_allowance", "decrease_allowance"])
def test_allowance_changes_need_balance(ledger, host, op):
    with host.as_caller(CAROL):
        with pytest.raises(NoBalance):
            getattr(ledger, op)(BOB, 1)


@pytest.mark.parametrize("op", ["increase_allowance", "decrease_allowance"])
def test_allowance_changes_reject_self(ledger, op):
    with pytest.raises(InvalidOperation):
        getattr(ledger, op)(ALICE, 1)


def test_increase_allowance_overflow(ledger, host, kv):
    ledger.approve(BOB, U128_MAX)
    with unchanged(kv, host):
        with pytest.raises(ArithmeticOverflow):
            ledger.increase_allowance(BOB, 1)
    assert ledger.allowance(ALICE, BOB) == U128_MAX


def test_allowance_of_unknown_pair_is_zero(ledger):
    assert ledger.allowance(CAROL, DAVE) == 0
