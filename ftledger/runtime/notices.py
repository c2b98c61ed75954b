from __future__ import annotations

"""
Notice log for the local host.

Notices are free-form text lines ("Minted 10 tokens for 0x..") published by
the ledger after a successful commit. The host keeps them in order and mirrors
each one to the "ftledger.notice" logger at INFO.
"""

from dataclasses import dataclass
from typing import Iterator, List

from ..logging import get_logger

log = get_logger("ftledger.notice")


@dataclass
class Notice:
    """One published notice, numbered in emission order."""

    seq: int
    text: str


class NoticeLog:
    def __init__(self) -> None:
        self._notices: List[Notice] = []

    def append(self, text: str) -> Notice:
        if not isinstance(text, str):
            raise TypeError("notice text must be str")
        n = Notice(seq=len(self._notices), text=text)
        self._notices.append(n)
        log.info(text, extra={"seq": n.seq})
        return n

    def texts(self) -> List[str]:
        return [n.text for n in self._notices]

    def drain(self) -> List[Notice]:
        """Return all notices and clear the log."""
        out, self._notices = self._notices, []
        return out

    def __iter__(self) -> Iterator[Notice]:
        return iter(list(self._notices))

    def __len__(self) -> int:
        return len(self._notices)


__all__ = ["Notice", "NoticeLog"]
