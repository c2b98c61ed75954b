"""
ftledger — a deterministic fungible-token ledger.

The ledger keeps balances, allowances, an authorized-minter set and a fixed
total supply in a single state record that is loaded, mutated and written back
once per call. Higher layers (CLI, hosts) build on `ftledger.contract`.

Only the version is re-exported here to keep import-time side effects near zero.
"""

from __future__ import annotations

from .version import __version__


def get_version() -> str:
    """Return the semantic version string for this package."""
    return __version__


__all__ = ["__version__", "get_version"]
