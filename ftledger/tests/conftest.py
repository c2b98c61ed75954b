from __future__ import annotations

import logging

import pytest

from ftledger.config import LedgerConfig
from ftledger.contract import FungibleToken
from ftledger.db import MemoryKV
from ftledger.runtime.host import KVHost
from ftledger.state import Metadata

ALICE = bytes([0xA1]) * 20
BOB = bytes([0xB0]) * 20
CAROL = bytes([0xC4]) * 20
DAVE = bytes([0xD5]) * 20

STATE_KEY = b"ft-ledger"

GOLD = Metadata(name="Gold", symbol="GLD", decimals=18, icon=None)


def make_config(**overrides) -> LedgerConfig:
    base = dict(
        state_key=STATE_KEY,
        db_uri="memory://",
        log_level="INFO",
        log_format="text",
        max_decimals=18,
    )
    base.update(overrides)
    return LedgerConfig(**base)


@pytest.fixture(autouse=True)
def _reset_ftledger_logging():
    """Drop handlers installed by `configure()` (the CLI installs one per run)."""
    yield
    root = logging.getLogger("ftledger")
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.NOTSET)


@pytest.fixture()
def config() -> LedgerConfig:
    return make_config()


@pytest.fixture()
def kv() -> MemoryKV:
    return MemoryKV()


@pytest.fixture()
def host(kv: MemoryKV) -> KVHost:
    """Fresh host; Alice is the deployer and the initial caller."""
    return KVHost(kv, deployer=ALICE)


@pytest.fixture()
def token(host: KVHost, config: LedgerConfig) -> FungibleToken:
    """Uninitialized ledger."""
    return FungibleToken(host, config)


@pytest.fixture()
def ledger(token: FungibleToken, host: KVHost) -> FungibleToken:
    """Initialized ledger: Alice=100, Bob=50. Init notices are drained."""
    token.initialize(GOLD, [ALICE, BOB], [100, 50])
    host.notices.drain()
    return token
