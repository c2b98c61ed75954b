"""
ftledger.contract — the operation dispatch layer.

`FungibleToken` is the public surface of the ledger. Every mutating call
follows the same shape:

    1) load the Ledger State from the host (NotInitialized if absent)
    2) normalize arguments (addresses → 20 bytes, amounts → u128)
    3) check caller-specific preconditions
    4) mutate an in-memory copy through the state components
    5) check invariants and persist the whole record once
    6) publish the notices queued during the call

Every call runs inside a logging scope carrying `op` and `caller`; failures
are logged at WARNING with their error code. Any LedgerError raised in 1-5
propagates to the caller with nothing written
and nothing published. Views load the state and never write.

    host = KVHost(open_kv("memory://"), deployer=alice)
    token = FungibleToken(host)
    token.initialize(Metadata("Gold", "GLD", 18), [alice, bob], [100, 50])
    with host.as_caller(alice):
        token.transfer(bob, 10)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Sequence, Tuple, Union

from .address import Address, AddressLike, to_address, to_hex
from .config import LedgerConfig, load_config
from .encoding import decode_state, encode_state
from .errors import (
    AlreadyInitialized,
    InvalidMetadata,
    InvalidOperation,
    LedgerError,
    NoBalance,
    NotInitialized,
    Unauthorized,
    ZeroAmount,
)
from .logging import call_scope, get_logger
from .math.safe_uint import require_u128
from .runtime.host import Host
from .state import AllowanceUpdateOp, LedgerState, Metadata

log = get_logger("ftledger.contract")

MetadataLike = Union[Metadata, Mapping[str, Any]]


def _nonzero(amount: Any) -> int:
    if require_u128(amount) == 0:
        raise ZeroAmount()
    return amount


class FungibleToken:
    """Fungible-token ledger bound to one host and one state key."""

    def __init__(self, host: Host, config: Optional[LedgerConfig] = None) -> None:
        self.host = host
        self.config = config or load_config()

    @property
    def state_key(self) -> bytes:
        return self.config.state_key

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def _load(self) -> LedgerState:
        blob = self.host.store_read(self.state_key)
        if blob is None:
            raise NotInitialized()
        return decode_state(blob)

    def _commit(self, state: LedgerState) -> None:
        state.check_invariants()
        self.host.store_write(self.state_key, encode_state(state))
        for text in state.notices:
            self.host.emit_notice(text)
        log.debug(
            "committed",
            extra={"total_supply": state.total_supply, "notices": len(state.notices)},
        )

    @contextmanager
    def _call(self, op: str) -> Iterator[Address]:
        """Bind logging context for one operation and log failures."""
        caller = self.host.current_caller()
        with call_scope(op, to_hex(caller)):
            try:
                yield caller
            except LedgerError as e:
                log.warning("%s failed: %s", op, e.message, extra={"code": e.code})
                raise

    @contextmanager
    def _mutate(self, op: str) -> Iterator[Tuple[LedgerState, Address]]:
        """
        Yield (state copy, caller). The copy is committed only if the block
        exits cleanly; otherwise it is dropped.
        """
        with self._call(op) as caller:
            state = self._load().copy()
            yield state, caller
            self._commit(state)

    def _view(self, op: str) -> LedgerState:
        with self._call(op):
            return self._load()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(
        self,
        metadata: MetadataLike,
        account_ids: Sequence[AddressLike],
        amounts: Sequence[int],
    ) -> None:
        """
        Create the ledger. Only the deployer may call this, and only once.

        Duplicate entries in `account_ids` keep their first amount.
        """
        with self._call("initialize") as caller:
            if caller != self.host.deployer_address():
                raise Unauthorized("only the deployer can initialize", caller=caller)
            if self.host.store_read(self.state_key) is not None:
                raise AlreadyInitialized()
            meta = _coerce_metadata(metadata)
            state = LedgerState.create(
                meta,
                self.host.deployer_address(),
                [to_address(a) for a in account_ids],
                list(amounts),
                max_decimals=self.config.max_decimals,
            )
            self._commit(state)
            log.info(
                "initialized",
                extra={"symbol": meta.symbol, "total_supply": state.total_supply},
            )

    def add_authorized_caller(self, address: AddressLike) -> None:
        with self._mutate("add_authorized_caller") as (state, caller):
            state.minters.add_authorized_minter(
                to_address(address), caller=caller, deployer=self.host.deployer_address()
            )

    def is_initialized(self) -> bool:
        return self.host.store_read(self.state_key) is not None

    # ------------------------------------------------------------------
    # Metadata views
    # ------------------------------------------------------------------

    def name(self) -> str:
        return self._view("name").metadata.name

    def symbol(self) -> str:
        return self._view("symbol").metadata.symbol

    def decimals(self) -> int:
        return self._view("decimals").metadata.decimals

    def icon(self) -> Optional[str]:
        return self._view("icon").metadata.icon

    def metadata(self) -> Metadata:
        return self._view("metadata").metadata

    # ------------------------------------------------------------------
    # Supply & balances
    # ------------------------------------------------------------------

    def total_supply(self) -> int:
        return self._view("total_supply").total_supply

    def balance_of(self, account: AddressLike) -> int:
        with self._call("balance_of"):
            return self._load().balances.balance_of(to_address(account))

    def is_authorized_minter(self, address: AddressLike) -> bool:
        with self._call("is_authorized_minter"):
            return self._load().minters.is_authorized_minter(to_address(address))

    def mint(self, recipient: AddressLike, amount: int) -> None:
        with self._mutate("mint") as (state, caller):
            to = to_address(recipient)
            if caller not in state.minters:
                raise Unauthorized("only authorized caller can mint tokens", caller=caller)
            state.balances.mint(to, _nonzero(amount))

    def transfer(self, recipient: AddressLike, amount: int) -> None:
        with self._mutate("transfer") as (state, caller):
            to = to_address(recipient)
            state.balances.transfer(caller, to, _nonzero(amount))

    def transfer_from(
        self, sender: AddressLike, recipient: AddressLike, amount: int
    ) -> None:
        """Move `amount` from `sender` to `recipient`, spending the caller's allowance."""
        with self._mutate("transfer_from") as (state, caller):
            owner = to_address(sender)
            to = to_address(recipient)
            _nonzero(amount)
            state.allowances.update(AllowanceUpdateOp.SPEND, owner, caller, amount)
            state.balances.transfer(owner, to, amount)

    # ------------------------------------------------------------------
    # Allowances
    # ------------------------------------------------------------------

    def allowance(self, owner: AddressLike, spender: AddressLike) -> int:
        with self._call("allowance"):
            state = self._load()
            return state.allowances.allowance(to_address(owner), to_address(spender))

    def approve(self, spender: AddressLike, amount: int) -> None:
        """Set the caller's allowance for `spender`. Zero is allowed."""
        self._update_allowance("approve", AllowanceUpdateOp.SET, spender, amount)

    def increase_allowance(self, spender: AddressLike, amount: int) -> None:
        self._update_allowance("increase_allowance", AllowanceUpdateOp.INCREASE, spender, amount)

    def decrease_allowance(self, spender: AddressLike, amount: int) -> None:
        self._update_allowance("decrease_allowance", AllowanceUpdateOp.DECREASE, spender, amount)

    def _update_allowance(
        self, op: str, update: AllowanceUpdateOp, spender: AddressLike, amount: int
    ) -> None:
        with self._mutate(op) as (state, owner):
            sp = to_address(spender)
            if update is AllowanceUpdateOp.SET:
                require_u128(amount)
            else:
                _nonzero(amount)
            if owner == sp:
                raise InvalidOperation("owner and spender cannot be the same", account=owner)
            if not state.balances.has_balance(owner):
                raise NoBalance(account=owner)
            state.allowances.update(update, owner, sp, amount)


def _coerce_metadata(metadata: MetadataLike) -> Metadata:
    if isinstance(metadata, Metadata):
        return metadata
    if isinstance(metadata, Mapping):
        return Metadata.from_dict(metadata)
    raise InvalidMetadata("metadata must be a Metadata or a mapping")


__all__ = ["FungibleToken"]
