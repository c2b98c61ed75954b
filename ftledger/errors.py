"""
ftledger.errors
---------------

A small, consistent error system for the ledger.

Design goals
------------
- One root `LedgerError` with a machine-friendly `code` and optional `data`.
- One concrete subclass per failure kind, so callers can `except` precisely.
- Safe JSON representation (`to_dict`) suitable for logs and the CLI.

Every precondition violation raises one of these *before* any persistence
call; the dispatch layer never catches them to continue. A raised error means
the call had no observable effect on the stored ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping


class LedgerErrorCode(str, Enum):
    # Authorization / lifecycle
    UNAUTHORIZED = "LEDGER/UNAUTHORIZED"
    ALREADY_INITIALIZED = "LEDGER/ALREADY_INITIALIZED"
    NOT_INITIALIZED = "LEDGER/NOT_INITIALIZED"
    ALREADY_AUTHORIZED = "LEDGER/ALREADY_AUTHORIZED"

    # Input validation
    INVALID_METADATA = "LEDGER/INVALID_METADATA"
    LENGTH_MISMATCH = "LEDGER/LENGTH_MISMATCH"
    INVALID_OPERATION = "LEDGER/INVALID_OPERATION"
    ZERO_AMOUNT = "LEDGER/ZERO_AMOUNT"
    INVALID_AMOUNT = "LEDGER/INVALID_AMOUNT"
    INVALID_ADDRESS = "LEDGER/INVALID_ADDRESS"

    # Arithmetic / balances / allowances
    ARITHMETIC_OVERFLOW = "LEDGER/ARITHMETIC_OVERFLOW"
    INSUFFICIENT_BALANCE = "LEDGER/INSUFFICIENT_BALANCE"
    NO_BALANCE = "LEDGER/NO_BALANCE"
    NO_ALLOWANCE = "LEDGER/NO_ALLOWANCE"
    ALLOWANCE_TOO_SMALL = "LEDGER/ALLOWANCE_TOO_SMALL"

    # Persistence / environment
    STATE_CORRUPT = "LEDGER/STATE_CORRUPT"
    STATE_INVARIANT = "LEDGER/STATE_INVARIANT"
    CONFIG = "LEDGER/CONFIG"


@dataclass(eq=False)
class LedgerError(Exception):
    """
    Root error for ledger components.

    Attributes
    ----------
    code: str
        Machine-stable error code (see LedgerErrorCode).
    message: str
        Human hint suitable for logs.
    data: dict
        Optional machine data (addresses as hex, amounts). JSON-serializable.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(f"{self.code}: {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs and CLI output."""
        return {
            "code": str(self.code),
            "message": self.message,
            "data": _jsonmap(self.data),
        }

    def __str__(self) -> str:
        parts = [f"{self.code}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_coerce_json(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)


def _make(code: LedgerErrorCode, default_message: str):
    """Build the common `__init__(message=..., **data)` for a subclass."""

    def __init__(self, message: str = default_message, **data: Any) -> None:
        LedgerError.__init__(self, code=code.value, message=message, data=_jsonmap(data))

    return __init__


class Unauthorized(LedgerError):
    __init__ = _make(LedgerErrorCode.UNAUTHORIZED, "caller is not authorized")


class AlreadyInitialized(LedgerError):
    __init__ = _make(LedgerErrorCode.ALREADY_INITIALIZED, "the ledger is already initialized")


class NotInitialized(LedgerError):
    __init__ = _make(LedgerErrorCode.NOT_INITIALIZED, "the ledger isn't initialized")


class AlreadyAuthorized(LedgerError):
    __init__ = _make(LedgerErrorCode.ALREADY_AUTHORIZED, "address is already an authorized caller")


class InvalidMetadata(LedgerError):
    __init__ = _make(LedgerErrorCode.INVALID_METADATA, "invalid metadata")


class LengthMismatch(LedgerError):
    __init__ = _make(LedgerErrorCode.LENGTH_MISMATCH, "account_ids and amounts length mismatch")


class InvalidOperation(LedgerError):
    __init__ = _make(LedgerErrorCode.INVALID_OPERATION, "invalid operation")


class ZeroAmount(LedgerError):
    __init__ = _make(LedgerErrorCode.ZERO_AMOUNT, "amount should be greater than 0")


class InvalidAmount(LedgerError):
    __init__ = _make(LedgerErrorCode.INVALID_AMOUNT, "amount must be an integer in the u128 range")


class InvalidAddress(LedgerError):
    __init__ = _make(LedgerErrorCode.INVALID_ADDRESS, "invalid address")


class ArithmeticOverflow(LedgerError):
    __init__ = _make(LedgerErrorCode.ARITHMETIC_OVERFLOW, "arithmetic overflow")


class InsufficientBalance(LedgerError):
    __init__ = _make(LedgerErrorCode.INSUFFICIENT_BALANCE, "not enough balance to transfer")


class NoBalance(LedgerError):
    __init__ = _make(LedgerErrorCode.NO_BALANCE, "account should have tokens in the balance")


class NoAllowance(LedgerError):
    __init__ = _make(LedgerErrorCode.NO_ALLOWANCE, "no allowance")


class AllowanceTooSmall(LedgerError):
    __init__ = _make(LedgerErrorCode.ALLOWANCE_TOO_SMALL, "the allowance is too small")


class StateCorrupt(LedgerError):
    __init__ = _make(LedgerErrorCode.STATE_CORRUPT, "stored ledger state cannot be decoded")


class StateInvariant(LedgerError):
    __init__ = _make(LedgerErrorCode.STATE_INVARIANT, "state invariant broken")


class ConfigError(LedgerError):
    __init__ = _make(LedgerErrorCode.CONFIG, "invalid configuration")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    # Keep JSON primitives; hex-encode bytes; stringify the rest.
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    return str(v)


__all__ = [
    "LedgerErrorCode",
    "LedgerError",
    "Unauthorized",
    "AlreadyInitialized",
    "NotInitialized",
    "AlreadyAuthorized",
    "InvalidMetadata",
    "LengthMismatch",
    "InvalidOperation",
    "ZeroAmount",
    "InvalidAmount",
    "InvalidAddress",
    "ArithmeticOverflow",
    "InsufficientBalance",
    "NoBalance",
    "NoAllowance",
    "AllowanceTooSmall",
    "StateCorrupt",
    "StateInvariant",
    "ConfigError",
]
