"""
ftledger.encoding
=================

Public encoding surface for the persisted ledger record:

- state_codec.py: header-framed canonical CBOR for LedgerState
"""

from __future__ import annotations

from .state_codec import decode_state, encode_state

__all__ = ["encode_state", "decode_state"]
