"""
ftledger.config — runtime settings for the ledger and its local host.

Configuration precedence:
  1) Environment variables (FTLEDGER_*)
  2) Hardcoded safe defaults below

Key env vars:
  - FTLEDGER_STATE_KEY     (str)   default: ft-ledger
  - FTLEDGER_DB            (uri)   default: sqlite:///ftledger.db
  - FTLEDGER_LOG_LEVEL     (str)   default: INFO
  - FTLEDGER_LOG_FORMAT    (str)   default: auto   (json | text | auto)
  - FTLEDGER_MAX_DECIMALS  (int)   default: 18     (clamped to 0..18)

Invalid values fall back to the default rather than failing at import.

Usage:
    from ftledger.config import load_config
    CFG = load_config()
    kv = open_kv(CFG.db_uri)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict

DEFAULT_STATE_KEY = b"ft-ledger"
DEFAULT_DB_URI = "sqlite:///ftledger.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "auto"
DEFAULT_MAX_DECIMALS = 18

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_LOG_FORMATS = ("json", "text", "auto")


# ----------------------------- helpers ---------------------------------------


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_choice(name: str, default: str, choices: tuple, *, upper: bool = False) -> str:
    v = _env_str(name, default)
    v = v.upper() if upper else v.lower()
    return v if v in choices else default


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    return max(min_v, min(max_v, v))


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    state_key: bytes
    db_uri: str
    log_level: str
    log_format: str
    max_decimals: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "state_key": self.state_key.decode("utf-8", "replace"),
            "db_uri": self.db_uri,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "max_decimals": self.max_decimals,
        }


@lru_cache(maxsize=1)
def load_config() -> LedgerConfig:
    """
    Build and cache a LedgerConfig from environment + safe defaults.
    Call `load_config.cache_clear()` after changing the environment.
    """
    return LedgerConfig(
        state_key=_env_str("FTLEDGER_STATE_KEY", DEFAULT_STATE_KEY.decode()).encode("utf-8"),
        db_uri=_env_str("FTLEDGER_DB", DEFAULT_DB_URI),
        log_level=_env_choice("FTLEDGER_LOG_LEVEL", DEFAULT_LOG_LEVEL, _LOG_LEVELS, upper=True),
        log_format=_env_choice("FTLEDGER_LOG_FORMAT", DEFAULT_LOG_FORMAT, _LOG_FORMATS),
        max_decimals=_env_int("FTLEDGER_MAX_DECIMALS", DEFAULT_MAX_DECIMALS, min_v=0, max_v=18),
    )


__all__ = ["LedgerConfig", "load_config", "DEFAULT_STATE_KEY", "DEFAULT_DB_URI"]
