"""Data models for the wallet lookup."""

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

LAMPORTS_PER_SOL = 10 ** 9

HISTORY_LIMIT = 20
ACTIVITY_LIMIT = 10


class NetworkMode(str, enum.Enum):
    """Which cluster backs all queries."""
    MAIN = "main"
    DEV = "dev"

    def toggled(self) -> "NetworkMode":
        return NetworkMode.DEV if self is NetworkMode.MAIN else NetworkMode.MAIN


@dataclass(frozen=True)
class TokenHolding:
    """One token account's balance."""
    mint: str
    amount: Decimal

    @classmethod
    def from_rpc(cls, data: dict[str, Any]) -> "TokenHolding":
        """Create TokenHolding from a jsonParsed getTokenAccountsByOwner entry."""
        info = data["account"]["data"]["parsed"]["info"]
        token_amount = info.get("tokenAmount") or {}

        # uiAmountString is exact; uiAmount is a float and may be null
        ui_amount = token_amount.get("uiAmountString")
        if ui_amount is None:
            ui_amount = token_amount.get("uiAmount") or 0

        return cls(mint=info["mint"], amount=Decimal(str(ui_amount)))


@dataclass(frozen=True)
class ActivityEntry:
    """A recent transaction signature."""
    signature: str
    occurred_at: int | None     # Unix timestamp; None while unconfirmed
    succeeded: bool

    @property
    def pending(self) -> bool:
        return self.occurred_at is None

    @classmethod
    def from_rpc(cls, data: dict[str, Any]) -> "ActivityEntry":
        """Create ActivityEntry from a getSignaturesForAddress item."""
        block_time = data.get("blockTime")
        return cls(
            signature=data["signature"],
            occurred_at=int(block_time) if block_time is not None else None,
            succeeded=data.get("err") is None,
        )


@dataclass(frozen=True)
class LookupResult:
    """Merged snapshot of one wallet lookup."""
    address: str
    balance: Decimal
    tokens: tuple[TokenHolding, ...] = ()
    activity: tuple[ActivityEntry, ...] = ()
    network_mode: NetworkMode = NetworkMode.MAIN


@dataclass
class PreferenceState:
    """User preferences persisted across sessions."""
    search_history: list[str] = field(default_factory=list)   # newest first
    favorites: list[str] = field(default_factory=list)        # newest first
    network_mode: NetworkMode = NetworkMode.MAIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": 1,
            "search_history": list(self.search_history),
            "favorites": list(self.favorites),
            "network_mode": self.network_mode.value,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "PreferenceState":
        """
        Rebuild state from a stored document.

        Bad entries are dropped rather than rejected, so a partly damaged
        document still restores what it can.
        """
        if not isinstance(data, dict):
            return cls()

        try:
            mode = NetworkMode(data.get("network_mode", NetworkMode.MAIN.value))
        except ValueError:
            mode = NetworkMode.MAIN

        return cls(
            search_history=_unique_strings(data.get("search_history"))[:HISTORY_LIMIT],
            favorites=_unique_strings(data.get("favorites")),
            network_mode=mode,
        )


def _unique_strings(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    seen: dict[str, None] = {}
    for value in values:
        if isinstance(value, str) and value not in seen:
            seen[value] = None
    return list(seen)
