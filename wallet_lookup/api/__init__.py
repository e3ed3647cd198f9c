"""API clients for external services."""

from .base import APIError, RemoteError, TransportError
from .solana_rpc import SolanaRPCClient

__all__ = ["APIError", "RemoteError", "SolanaRPCClient", "TransportError"]
