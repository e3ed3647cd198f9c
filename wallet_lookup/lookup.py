"""Wallet lookup - fetch balance, tokens and activity for an address."""

import asyncio
import logging
from typing import Any, Awaitable

from .api.solana_rpc import SolanaRPCClient
from .config import Config, get_config
from .models import LookupResult
from .preferences import PreferenceStore
from .resolvers import ActivityResolver, BalanceResolver, TokenResolver

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when the lookup input is rejected before any request is made."""
    pass


def _discard_outcome(task: asyncio.Task) -> None:
    # Results of tasks still running after a sibling failed are dropped
    if not task.cancelled():
        task.exception()


async def _join_all_or_nothing(*coros: Awaitable[Any]) -> list[Any]:
    """
    Run coroutines concurrently and return all their results in order.

    If any of them fails, raise that error as soon as it is seen. The others
    are left to finish on their own and their results are thrown away.
    """
    tasks = [asyncio.ensure_future(c) for c in coros]
    pending = set(tasks)

    while pending:
        done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
        failed = [t for t in tasks if t in done and t.exception() is not None]
        if failed:
            for task in pending:
                task.add_done_callback(_discard_outcome)
            # Retrieve every failure so none is reported as unhandled
            for task in failed[1:]:
                task.exception()
            raise failed[0].exception()

    return [t.result() for t in tasks]


class LookupOrchestrator:
    """
    Runs a wallet lookup.

    Balance, token and activity queries go out in parallel to the endpoint
    picked by the current network mode. A lookup either returns all three or
    fails as a whole; only successful lookups are added to search history.
    """

    def __init__(self, preferences: PreferenceStore, config: Config | None = None):
        self.preferences = preferences
        self.config = config or get_config()
        self._clients: dict[str, SolanaRPCClient] = {}

    def rpc_client(self) -> SolanaRPCClient:
        """RPC client for the current network mode."""
        url = self.config.rpc_url_for(self.preferences.network_mode)
        client = self._clients.get(url)
        if client is None:
            client = SolanaRPCClient(url, timeout=self.config.rpc_timeout)
            self._clients[url] = client
        return client

    async def lookup(self, address: str) -> LookupResult:
        """
        Look up a wallet.

        Args:
            address: Wallet address; surrounding whitespace is ignored

        Returns:
            LookupResult with balance, tokens and recent activity

        Raises:
            ValidationError: The address is empty
            TransportError: The endpoint could not be reached
            RemoteError: The endpoint rejected one of the queries
        """
        address = (address or "").strip()
        if not address:
            raise ValidationError("Please enter a Solana address")

        mode = self.preferences.network_mode
        client = self.rpc_client()
        logger.debug("Looking up %s on %s", address, mode.value)

        balance, tokens, activity = await _join_all_or_nothing(
            BalanceResolver(client).resolve(address),
            TokenResolver(client).resolve(address),
            ActivityResolver(client).resolve(address),
        )

        self.preferences.add_to_history(address)

        return LookupResult(
            address=address,
            balance=balance,
            tokens=tokens,
            activity=activity,
            network_mode=mode,
        )

    async def aclose(self) -> None:
        """Clean up resources."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


async def lookup_wallet(
    address: str,
    preferences: PreferenceStore,
    config: Config | None = None,
) -> LookupResult:
    """
    Quick function to look up one wallet.

    Args:
        address: Wallet address
        preferences: Store that receives the history entry
        config: Optional config override

    Returns:
        LookupResult
    """
    async with LookupOrchestrator(preferences, config) as orchestrator:
        return await orchestrator.lookup(address)
