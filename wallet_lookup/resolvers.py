"""Resolvers - turn raw RPC results into view model fragments."""

from decimal import Decimal

from .api.solana_rpc import SolanaRPCClient
from .models import ACTIVITY_LIMIT, LAMPORTS_PER_SOL, ActivityEntry, TokenHolding

# SPL Token program; Token-2022 accounts are not listed
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


class BalanceResolver:
    """Resolves the native SOL balance of an address."""

    def __init__(self, rpc_client: SolanaRPCClient):
        self.rpc_client = rpc_client

    async def resolve(self, address: str) -> Decimal:
        """
        Get the SOL balance of an address.

        Args:
            address: Wallet address

        Returns:
            Balance in SOL, exact (lamports / 10^9)
        """
        lamports = await self.rpc_client.get_balance(address)
        return Decimal(lamports) / LAMPORTS_PER_SOL


class TokenResolver:
    """
    Resolves the token holdings of an address.

    Every token account with a positive balance becomes one holding;
    accounts sharing a mint are not merged.
    """

    def __init__(self, rpc_client: SolanaRPCClient, program_id: str = TOKEN_PROGRAM_ID):
        self.rpc_client = rpc_client
        self.program_id = program_id

    async def resolve(self, address: str) -> tuple[TokenHolding, ...]:
        """
        Get the non-empty token accounts of an address.

        Args:
            address: Wallet address

        Returns:
            Holdings in the order the RPC returned them
        """
        accounts = await self.rpc_client.get_token_accounts_by_owner(
            address, self.program_id
        )
        if not accounts:
            return ()

        holdings = (TokenHolding.from_rpc(acct) for acct in accounts)
        return tuple(h for h in holdings if h.amount > 0)


class ActivityResolver:
    """Resolves the most recent transactions of an address."""

    def __init__(self, rpc_client: SolanaRPCClient, limit: int = ACTIVITY_LIMIT):
        self.rpc_client = rpc_client
        self.limit = limit

    async def resolve(self, address: str) -> tuple[ActivityEntry, ...]:
        """
        Get the latest signatures for an address, newest first.

        Args:
            address: Wallet address

        Returns:
            Up to ``limit`` activity entries
        """
        signatures = await self.rpc_client.get_signatures_for_address(
            address, limit=self.limit
        )
        return tuple(ActivityEntry.from_rpc(s) for s in signatures[:self.limit])
