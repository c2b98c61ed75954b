"""
ftledger.address — account identifiers.

Addresses are raw 20-byte values. Hex strings (with or without "0x") are
accepted by the helpers and normalized to bytes; any other type or length is
rejected with `InvalidAddress`.
"""

from __future__ import annotations

from typing import Union

from .errors import InvalidAddress

ADDRESS_LEN = 20

Address = bytes
AddressLike = Union[bytes, bytearray, memoryview, str]


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_address(value: AddressLike) -> Address:
    """
    Coerce `value` to a 20-byte address.
    - If str, interpret as hex (with or without '0x').
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        b = bytes(value)
    elif isinstance(value, str):
        h = _strip_0x(value.strip())
        try:
            b = bytes.fromhex(h)
        except ValueError as e:
            raise InvalidAddress("address is not valid hex", value=value) from e
    else:
        raise InvalidAddress(
            "address must be bytes or hex string", type=type(value).__name__
        )
    if len(b) != ADDRESS_LEN:
        raise InvalidAddress(
            f"address must be {ADDRESS_LEN} bytes", length=len(b), value=b
        )
    return b


def to_hex(addr: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(addr).hex()


__all__ = ["ADDRESS_LEN", "Address", "AddressLike", "to_address", "to_hex"]
