"""
ftledger.state.metadata — immutable token metadata.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from ..errors import InvalidMetadata

MAX_DECIMALS = 18


@dataclass(frozen=True)
class Metadata:
    """
    Fields
    ------
    name:      Human-readable token name.
    symbol:    Ticker symbol.
    decimals:  Display decimals, 0..18.
    icon:      Optional icon (URL or data URI).
    """

    name: str
    symbol: str
    decimals: int
    icon: Optional[str] = None

    def validate(self, max_decimals: int = MAX_DECIMALS) -> "Metadata":
        if not isinstance(self.name, str) or not isinstance(self.symbol, str):
            raise InvalidMetadata("name and symbol must be strings")
        if self.icon is not None and not isinstance(self.icon, str):
            raise InvalidMetadata("icon must be a string or None")
        if (
            not isinstance(self.decimals, int)
            or isinstance(self.decimals, bool)
            or not 0 <= self.decimals <= max_decimals
        ):
            raise InvalidMetadata("invalid decimals", decimals=repr(self.decimals))
        return self

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Metadata":
        try:
            return cls(
                name=d["name"],
                symbol=d["symbol"],
                decimals=d["decimals"],
                icon=d.get("icon"),
            )
        except KeyError as e:
            raise InvalidMetadata(f"missing metadata field {e.args[0]!r}") from e

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["MAX_DECIMALS", "Metadata"]
