from __future__ import annotations

import pytest

from ftledger.contract import FungibleToken
from ftledger.db import META_DEPLOYER, MemoryKV
from ftledger.errors import ConfigError, InsufficientBalance, InvalidAddress
from ftledger.runtime import Host, KVHost, NoticeLog

from .conftest import ALICE, BOB, GOLD, make_config


def test_kvhost_satisfies_host_protocol(host):
    assert isinstance(host, Host)


def test_caller_defaults_to_deployer_and_switches(host):
    assert host.current_caller() == ALICE
    assert host.deployer_address() == ALICE
    with host.as_caller("0x" + BOB.hex()) as h:
        assert h.current_caller() == BOB
    assert host.current_caller() == ALICE


def test_as_caller_restores_on_error(host):
    with pytest.raises(RuntimeError):
        with host.as_caller(BOB):
            raise RuntimeError("boom")
    assert host.current_caller() == ALICE


def test_bad_caller_rejected(host):
    with pytest.raises(InvalidAddress):
        with host.as_caller("0xzz"):
            pass


def test_store_roundtrip(host, kv):
    assert host.store_read(b"x") is None
    host.store_write(b"x", b"y")
    assert kv.get(b"x") == b"y"
    assert host.store_read(b"x") == b"y"


def test_notice_log():
    log = NoticeLog()
    first = log.append("one")
    log.append("two")
    assert first.seq == 0
    assert log.texts() == ["one", "two"]
    assert [n.seq for n in log.drain()] == [0, 1]
    assert len(log) == 0
    with pytest.raises(TypeError):
        log.append(b"bytes")  # type: ignore[arg-type]


def test_open_records_deployer(tmp_path):
    uri = f"sqlite:///{tmp_path / 'ledger.db'}"
    with KVHost.open(uri, deployer=ALICE) as h:
        assert h.kv.get(META_DEPLOYER) == ALICE
    with KVHost.open(uri, caller=BOB) as h:
        assert h.deployer_address() == ALICE
        assert h.current_caller() == BOB


def test_open_rejects_different_deployer(tmp_path):
    uri = f"sqlite:///{tmp_path / 'ledger.db'}"
    KVHost.open(uri, deployer=ALICE).close()
    with pytest.raises(ConfigError):
        KVHost.open(uri, deployer=BOB)


def test_open_requires_deploy(tmp_path):
    with pytest.raises(ConfigError):
        KVHost.open(f"sqlite:///{tmp_path / 'empty.db'}")


def test_ledger_persists_through_sqlite_host(tmp_path):
    uri = f"sqlite:///{tmp_path / 'ledger.db'}"
    with KVHost.open(uri, deployer=ALICE) as h:
        FungibleToken(h, make_config()).initialize(GOLD, [ALICE], [10])
    with KVHost.open(uri) as h:
        token = FungibleToken(h, make_config())
        token.transfer(BOB, 4)
    with KVHost.open(uri) as h:
        token = FungibleToken(h, make_config())
        assert token.balance_of(BOB) == 4
        assert token.total_supply() == 10


def test_notices_published_only_after_commit():
    kv = MemoryKV()
    host = KVHost(kv, deployer=ALICE)
    token = FungibleToken(host, make_config())
    token.initialize(GOLD, [ALICE], [10])
    host.notices.drain()
    with pytest.raises(InsufficientBalance):
        token.transfer(BOB, 11)
    assert len(host.notices) == 0
    token.transfer(BOB, 1)
    assert len(host.notices) == 1
