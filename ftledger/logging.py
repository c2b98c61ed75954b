"""
ftledger.logging
----------------

Log setup for the ledger, on top of the stdlib `logging` package.

Every ledger call runs inside `call_scope(op, caller)`; records emitted while
it is active carry both fields, plus a `trace_id` when one CLI invocation (or
any caller) opens a `trace_scope()`. Two renderings are available:

    JSON   {"ts": ..., "level": "WARNING", "logger": "ftledger.contract",
            "msg": "mint failed: ...", "op": "mint", "caller": "0x..", "code": ...}
    text   2026-01-05T12:34:56.789+00:00 WARNING ftledger.contract [op=mint caller=0x..] mint failed: ... code=...

Typical use:

    from ftledger import logging as flog
    flog.configure(json=False, level="INFO")
    log = flog.get_logger(__name__)
"""

from __future__ import annotations

import datetime as _dt
import io
import json as _json
import logging
import os
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

_EMPTY: Mapping[str, Any] = MappingProxyType({})
_FIELDS: ContextVar[Mapping[str, Any]] = ContextVar("ftledger_log_fields", default=_EMPTY)

# Context fields rendered first, in this order.
CONTEXT_ORDER = ("trace_id", "op", "caller")

_STD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


# ----------------------------
# Context fields
# ----------------------------


def context() -> Dict[str, Any]:
    return dict(_FIELDS.get())


def _merged(fields: Mapping[str, Any]) -> Mapping[str, Any]:
    cur = dict(_FIELDS.get())
    cur.update((k, _plain(v)) for k, v in fields.items())
    return MappingProxyType(cur)


def bind(**fields: Any) -> None:
    """Add fields to the current context until unbound or the scope ends."""
    _FIELDS.set(_merged(fields))


def unbind(*keys: str) -> None:
    _FIELDS.set(MappingProxyType({k: v for k, v in _FIELDS.get().items() if k not in keys}))


@contextmanager
def _scoped(**fields: Any) -> Iterator[None]:
    token = _FIELDS.set(_merged(fields))
    try:
        yield
    finally:
        _FIELDS.reset(token)


@contextmanager
def trace_scope(trace_id: Optional[str] = None) -> Iterator[str]:
    tid = trace_id or uuid.uuid4().hex[:12]
    with _scoped(trace_id=tid):
        yield tid


@contextmanager
def call_scope(op: str, caller: Any = None) -> Iterator[None]:
    """Tag records with the ledger operation and its caller."""
    with _scoped(op=op, caller=caller):
        yield


# ----------------------------
# Rendering
# ----------------------------


def _plain(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray, memoryview)):
        return "0x" + bytes(v).hex()
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    return str(v)


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Context fields followed by the record's `extra=` values."""
    out: Dict[str, Any] = {}
    ctx = _FIELDS.get()
    for k in CONTEXT_ORDER:
        if ctx.get(k) is not None:
            out[k] = ctx[k]
    for k, v in ctx.items():
        out.setdefault(k, v)
    for k, v in vars(record).items():
        if k not in _STD_ATTRS and not k.startswith("_"):
            out.setdefault(k, _plain(v))
    return out


def _timestamp(record: logging.LogRecord) -> str:
    ts = _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc)
    return ts.isoformat(timespec="milliseconds")


def _exc_text(record: logging.LogRecord) -> str:
    return "".join(traceback.format_exception(*record.exc_info)).rstrip() if record.exc_info else ""


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        doc: Dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k, v in _record_fields(record).items():
            doc.setdefault(k, v)
        err = _exc_text(record)
        if err:
            doc["err"] = err
        return _json.dumps(doc, separators=(",", ":"), default=str)


class TextFormatter(logging.Formatter):
    """`<ts> <LEVEL> <logger> [op=.. caller=..] <msg> key=value ...`"""

    def format(self, record: logging.LogRecord) -> str:
        fields = _record_fields(record)
        tags = " ".join(f"{k}={fields.pop(k)}" for k in CONTEXT_ORDER if k in fields)
        parts = [_timestamp(record), f"{record.levelname:<7}", record.name]
        if tags:
            parts.append(f"[{tags}]")
        parts.append(record.getMessage())
        parts.extend(f"{k}={v}" for k, v in fields.items())
        line = " ".join(parts)
        err = _exc_text(record)
        return f"{line}\n{err}" if err else line


# ----------------------------
# Setup
# ----------------------------


def configure(
    *,
    json: Optional[bool] = None,
    level: str | int = "INFO",
    stream: Optional[io.TextIOBase] = None,
) -> None:
    """
    Install one handler on the "ftledger" logger, replacing any earlier one.

    With `json=None` the format comes from FTLEDGER_LOG_FORMAT, falling back
    to JSON whenever the stream is not a terminal.
    """
    out = stream if stream is not None else sys.stderr
    handler = logging.StreamHandler(out)
    handler.setFormatter(JSONFormatter() if _want_json(json, out) else TextFormatter())

    root = logging.getLogger("ftledger")
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(_level(level))


def configure_from_config(cfg: Any, *, stream: Optional[io.TextIOBase] = None) -> None:
    """Apply `log_level`/`log_format` from a `ftledger.config.LedgerConfig`."""
    fmt = cfg.log_format
    configure(json=None if fmt == "auto" else fmt == "json", level=cfg.log_level, stream=stream)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "ftledger")


def _level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    v = getattr(logging, level.upper(), None)
    return v if isinstance(v, int) else logging.INFO


def _want_json(flag: Optional[bool], stream: Any) -> bool:
    if flag is not None:
        return flag
    env = os.environ.get("FTLEDGER_LOG_FORMAT", "").strip().lower()
    if env in ("json", "text"):
        return env == "json"
    isatty = getattr(stream, "isatty", None)
    return not (callable(isatty) and isatty())


__all__ = [
    "bind",
    "unbind",
    "context",
    "trace_scope",
    "call_scope",
    "configure",
    "configure_from_config",
    "get_logger",
    "JSONFormatter",
    "TextFormatter",
]
