"""
state_codec.py — stable LedgerState ↔ bytes encoding (canonical CBOR).

Design goals
------------
- Round-trip stable: decode(encode(s)) == s and re-encoding is byte-identical.
- Deterministic ordering: canonical CBOR map ordering via `cbor2`.
- Exact integers: u128 values above 2**64 ride as CBOR bignums (tag 2).
- Self-describing header with magic + version + format for future-proofing.

Wire layout
-----------
Header (6 bytes):
  0..3 : ASCII magic b"FTLS"  (Fungible-Token Ledger State)
  4    : version byte (0x01)
  5    : format byte  (0x01 = CBOR)

Payload: the map produced by `LedgerState.to_record()`.
"""
from __future__ import annotations

from typing import Any, Tuple

import cbor2

from ..errors import StateCorrupt
from ..state.ledger import LedgerState

MAGIC = b"FTLS"
VERSION = 1
FMT_CBOR = 0x01
HEADER_LEN = 6


def _wrap_with_header(payload: bytes, fmt: int = FMT_CBOR) -> bytes:
    return MAGIC + bytes((VERSION, fmt)) + payload


def _unwrap_header(blob: bytes) -> Tuple[int, bytes]:
    """Return (fmt, payload) after validating the header."""
    if len(blob) < HEADER_LEN or blob[:4] != MAGIC:
        raise StateCorrupt("bad state blob header")
    ver = blob[4]
    fmt = blob[5]
    if ver != VERSION:
        raise StateCorrupt(f"unsupported state version: {ver} (expected {VERSION})")
    if fmt != FMT_CBOR:
        raise StateCorrupt(f"unknown state format byte: {fmt!r}")
    return fmt, blob[HEADER_LEN:]


def dumps_record(record: Any) -> bytes:
    # canonical=True enforces deterministic map ordering and integer encodings
    return _wrap_with_header(cbor2.dumps(record, canonical=True))


def loads_record(blob: bytes) -> Any:
    _, payload = _unwrap_header(bytes(blob))
    try:
        return cbor2.loads(payload)
    except (cbor2.CBORDecodeError, ValueError, TypeError) as e:
        raise StateCorrupt(f"undecodable state payload: {e}") from e


def encode_state(state: LedgerState) -> bytes:
    """LedgerState → header + canonical CBOR bytes."""
    return dumps_record(state.to_record())


def decode_state(blob: bytes) -> LedgerState:
    """Bytes → LedgerState. Raises StateCorrupt for anything malformed."""
    return LedgerState.from_record(loads_record(blob))


__all__ = [
    "MAGIC",
    "VERSION",
    "FMT_CBOR",
    "dumps_record",
    "loads_record",
    "encode_state",
    "decode_state",
]
