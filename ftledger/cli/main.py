"""
ftledger - command-line interface for a local fungible-token ledger.

The ledger lives in a key-value store selected by --db (or FTLEDGER_DB).
Every command opens the store, runs exactly one ledger operation as the given
--caller, prints the result or the published notices, and closes the store.

Global options:
  --db TEXT              Store URI (sqlite:///path.db, memory://, path.db)
  --json                 Output JSON instead of plain text
  --verbose / -v         Log at DEBUG

Examples:
  ftledger deploy --deployer 0xaa..
  ftledger init --caller 0xaa.. --name Gold --symbol GLD --decimals 18 \\
      --holder 0xaa..=100 --holder 0xbb..=50
  ftledger transfer --caller 0xaa.. 0xbb.. 10
  ftledger balance 0xbb..
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple

import typer

from .. import logging as flog
from ..address import to_address, to_hex
from ..config import load_config
from ..contract import FungibleToken
from ..errors import ConfigError, InvalidAmount, LedgerError
from ..runtime.host import KVHost
from ..state import Metadata

app = typer.Typer(
    name="ftledger",
    help="Fungible-token ledger command-line interface",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self) -> None:
        self.db: Optional[str] = None
        self.json_output: bool = False


_ctx = GlobalContext()


@app.callback()
def main_callback(
    db: Optional[str] = typer.Option(
        None,
        "--db",
        help="Store URI (sqlite:///path.db, memory://, path.db)",
        envvar="FTLEDGER_DB",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output JSON instead of plain text",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log at DEBUG",
    ),
) -> None:
    """
    ftledger CLI for a local fungible-token ledger.
    """
    cfg = load_config()
    _ctx.db = db or cfg.db_uri
    _ctx.json_output = json_output
    flog.configure_from_config(cfg)
    if verbose:
        flog.get_logger().setLevel("DEBUG")


# ----------------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------------


def _fail(e: LedgerError) -> None:
    typer.echo(f"error: {e.code}: {e.message}", err=True)
    raise typer.Exit(1)


@contextmanager
def _token(caller: Optional[str] = None) -> Iterator[Tuple[FungibleToken, KVHost]]:
    """Open the store, yield a token bound to `caller`, and print notices."""
    try:
        try:
            host = KVHost.open(_ctx.db or load_config().db_uri, caller=caller)
        except ValueError as e:
            raise ConfigError(str(e), db=_ctx.db) from e
        with host, flog.trace_scope():
            yield FungibleToken(host), host
            for notice in host.notices.drain():
                _emit({"notice": notice.text}, notice.text)
    except LedgerError as e:
        _fail(e)


def _emit(obj: Any, text: str) -> None:
    typer.echo(json.dumps(obj) if _ctx.json_output else text)


def _parse_holder(text: str) -> Tuple[str, int]:
    addr, sep, amount = text.partition("=")
    if not sep:
        raise typer.BadParameter(f"expected ADDR=AMOUNT, got {text!r}", param_hint="--holder")
    try:
        return addr.strip(), int(amount.strip(), 0)
    except ValueError as e:
        raise InvalidAmount(field="holder", value=amount) from e


CallerOpt = typer.Option(None, "--caller", "-c", help="Caller address (defaults to the deployer)")


# ----------------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------------


@app.command()
def deploy(
    deployer: str = typer.Option(..., "--deployer", help="Deployer address (20-byte hex)"),
) -> None:
    """Create the store and record the deployer address."""
    try:
        with KVHost.open(_ctx.db or load_config().db_uri, deployer=deployer) as host:
            _emit({"deployer": to_hex(host.deployer_address())}, to_hex(host.deployer_address()))
    except ValueError as e:
        _fail(ConfigError(str(e), db=_ctx.db))
    except LedgerError as e:
        _fail(e)


@app.command()
def init(
    name: str = typer.Option(..., "--name", help="Token name"),
    symbol: str = typer.Option(..., "--symbol", help="Token symbol"),
    decimals: int = typer.Option(..., "--decimals", help="Display decimals (0..18)"),
    icon: Optional[str] = typer.Option(None, "--icon", help="Icon URL or data URI"),
    holder: List[str] = typer.Option([], "--holder", help="Initial balance as ADDR=AMOUNT (repeatable)"),
    caller: Optional[str] = CallerOpt,
) -> None:
    """Initialize the ledger with metadata and initial holders."""
    with _token(caller) as (token, _host):
        pairs = [_parse_holder(h) for h in holder]
        token.initialize(
            Metadata(name=name, symbol=symbol, decimals=decimals, icon=icon),
            [a for a, _ in pairs],
            [n for _, n in pairs],
        )
        total = token.total_supply()
        _emit({"initialized": True, "total_supply": total}, f"initialized {symbol} with total supply {total}")


@app.command("add-minter")
def add_minter(
    address: str = typer.Argument(..., help="Address to authorize"),
    caller: Optional[str] = CallerOpt,
) -> None:
    """Authorize an address to mint (deployer only)."""
    with _token(caller) as (token, _host):
        token.add_authorized_caller(address)


# ----------------------------------------------------------------------------
# Mutations
# ----------------------------------------------------------------------------


@app.command()
def mint(
    recipient: str = typer.Argument(..., help="Recipient address"),
    amount: int = typer.Argument(..., help="Amount in base units"),
    caller: Optional[str] = CallerOpt,
) -> None:
    """Mint new tokens to a recipient (authorized minters only)."""
    with _token(caller) as (token, _host):
        token.mint(recipient, amount)


@app.command()
def transfer(
    recipient: str = typer.Argument(..., help="Recipient address"),
    amount: int = typer.Argument(..., help="Amount in base units"),
    caller: Optional[str] = CallerOpt,
) -> None:
    """Transfer tokens from the caller."""
    with _token(caller) as (token, _host):
        token.transfer(recipient, amount)


@app.command("transfer-from")
def transfer_from(
    sender: str = typer.Argument(..., help="Owner whose tokens move"),
    recipient: str = typer.Argument(..., help="Recipient address"),
    amount: int = typer.Argument(..., help="Amount in base units"),
    caller: Optional[str] = CallerOpt,
) -> None:
    """Transfer tokens on behalf of an owner, spending the caller's allowance."""
    with _token(caller) as (token, _host):
        token.transfer_from(sender, recipient, amount)


@app.command()
def approve(
    spender: str = typer.Argument(..., help="Spender address"),
    amount: int = typer.Argument(..., help="Allowance to set"),
    caller: Optional[str] = CallerOpt,
) -> None:
    """Set the caller's allowance for a spender."""
    with _token(caller) as (token, _host):
        token.approve(spender, amount)
        _emit({"allowance": amount}, f"allowance set to {amount}")


@app.command("increase-allowance")
def increase_allowance(
    spender: str = typer.Argument(..., help="Spender address"),
    amount: int = typer.Argument(..., help="Amount to add"),
    caller: Optional[str] = CallerOpt,
) -> None:
    with _token(caller) as (token, host):
        token.increase_allowance(spender, amount)
        value = token.allowance(host.current_caller(), spender)
        _emit({"allowance": value}, f"allowance is now {value}")


@app.command("decrease-allowance")
def decrease_allowance(
    spender: str = typer.Argument(..., help="Spender address"),
    amount: int = typer.Argument(..., help="Amount to subtract"),
    caller: Optional[str] = CallerOpt,
) -> None:
    with _token(caller) as (token, host):
        token.decrease_allowance(spender, amount)
        value = token.allowance(host.current_caller(), spender)
        _emit({"allowance": value}, f"allowance is now {value}")


# ----------------------------------------------------------------------------
# Views
# ----------------------------------------------------------------------------


@app.command()
def metadata() -> None:
    """Show token metadata."""
    with _token() as (token, _host):
        meta = token.metadata()
        if _ctx.json_output:
            typer.echo(json.dumps(meta.to_dict()))
        else:
            typer.echo(f"name:     {meta.name}")
            typer.echo(f"symbol:   {meta.symbol}")
            typer.echo(f"decimals: {meta.decimals}")
            typer.echo(f"icon:     {meta.icon or '-'}")


@app.command()
def supply() -> None:
    """Show the total supply."""
    with _token() as (token, _host):
        total = token.total_supply()
        _emit({"total_supply": total}, str(total))


@app.command()
def balance(account: str = typer.Argument(..., help="Account address")) -> None:
    """Show an account balance."""
    with _token() as (token, _host):
        value = token.balance_of(account)
        _emit({"account": to_hex(to_address(account)), "balance": value}, str(value))


@app.command()
def allowance(
    owner: str = typer.Argument(..., help="Owner address"),
    spender: str = typer.Argument(..., help="Spender address"),
) -> None:
    """Show how much a spender may still move out of an owner's balance."""
    with _token() as (token, _host):
        value = token.allowance(owner, spender)
        _emit({"allowance": value}, str(value))


@app.command("is-minter")
def is_minter(address: str = typer.Argument(..., help="Address to check")) -> None:
    with _token() as (token, _host):
        value = token.is_authorized_minter(address)
        _emit({"authorized": value}, "yes" if value else "no")


def main() -> None:
    """Entry point for the ftledger CLI."""
    app()


if __name__ == "__main__":
    main()
