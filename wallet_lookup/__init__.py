"""Solana Wallet Lookup - balance, tokens and activity for any address."""

from .lookup import LookupOrchestrator, ValidationError, lookup_wallet
from .models import ActivityEntry, LookupResult, NetworkMode, TokenHolding
from .preferences import PreferenceStore

__all__ = [
    "lookup_wallet",
    "LookupOrchestrator",
    "ValidationError",
    "PreferenceStore",
    "LookupResult",
    "TokenHolding",
    "ActivityEntry",
    "NetworkMode",
]

__version__ = "0.1.0"
