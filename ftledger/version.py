"""ftledger.version — semantic version string.

Resolution order (first match wins):
  1) FTLEDGER_VERSION env var
  2) installed package metadata for the "ftledger" distribution
  3) BASE_VERSION
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata

BASE_VERSION = "0.1.0"


@lru_cache(maxsize=1)
def compute_version() -> str:
    env = os.getenv("FTLEDGER_VERSION")
    if env:
        return env.strip()
    try:
        return importlib_metadata.version("ftledger")
    except importlib_metadata.PackageNotFoundError:
        return BASE_VERSION


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "compute_version"]
