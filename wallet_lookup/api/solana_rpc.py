"""Solana JSON-RPC client."""

import itertools
import logging
from typing import Any

from .base import BaseAPIClient, RemoteError, TransportError

logger = logging.getLogger(__name__)

# Request ids are shared by every client in the process so none is reused.
_request_ids = itertools.count(1)


class SolanaRPCClient(BaseAPIClient):
    """
    Client for the Solana JSON-RPC API.

    One instance talks to exactly one endpoint; switching networks means
    using another instance.
    """

    MAINNET_RPC = "https://api.mainnet-beta.solana.com"

    def __init__(self, rpc_url: str | None = None, timeout: float = 30.0):
        """
        Initialize Solana RPC client.

        Args:
            rpc_url: RPC endpoint URL (defaults to public mainnet)
            timeout: Transport timeout in seconds
        """
        super().__init__(base_url=rpc_url or self.MAINNET_RPC, timeout=timeout)

    @property
    def rpc_url(self) -> str:
        return self.base_url

    def _get_default_headers(self) -> dict[str, str]:
        headers = super()._get_default_headers()
        headers["Content-Type"] = "application/json"
        return headers

    async def call(self, method: str, params: list[Any]) -> Any:
        """
        Make a JSON-RPC request.

        Args:
            method: RPC method name
            params: Positional method parameters

        Returns:
            The ``result`` member of the response envelope

        Raises:
            RemoteError: The endpoint reported an error object
            TransportError: The request failed or the reply was not an envelope
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(_request_ids),
            "method": method,
            "params": params,
        }
        logger.debug("rpc %s id=%s -> %s", method, payload["id"], self.rpc_url)

        data = await self.post(payload)

        if not isinstance(data, dict):
            raise TransportError(f"Unexpected RPC response for {method}: {data!r}")

        if "error" in data and data["error"] is not None:
            error = data["error"]
            if isinstance(error, dict):
                raise RemoteError(
                    str(error.get("message", error)),
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RemoteError(str(error))

        if "result" not in data:
            raise TransportError(f"RPC response for {method} has no result")

        return data["result"]

    async def get_balance(self, address: str) -> int:
        """
        Get the native balance of an account.

        Args:
            address: Account address

        Returns:
            Balance in lamports
        """
        result = await self.call("getBalance", [address])
        value = _context_value(result, "getBalance")
        return int(value) if value is not None else 0

    async def get_token_accounts_by_owner(
        self,
        owner: str,
        program_id: str,
    ) -> list[dict[str, Any]] | None:
        """
        Get token accounts owned by an address under one token program.

        Args:
            owner: Wallet address
            program_id: Token program the accounts belong to

        Returns:
            List of keyed accounts with jsonParsed data, or None if absent
        """
        result = await self.call(
            "getTokenAccountsByOwner",
            [owner, {"programId": program_id}, {"encoding": "jsonParsed"}],
        )
        return _context_value(result, "getTokenAccountsByOwner")

    async def get_signatures_for_address(
        self,
        address: str,
        limit: int = 10,
    ) -> list[dict[str, Any]]:
        """
        Get the most recent transaction signatures for an address.

        Args:
            address: Account address
            limit: Max signatures (max 1000)

        Returns:
            List of signature info, newest first
        """
        result = await self.call(
            "getSignaturesForAddress",
            [address, {"limit": min(limit, 1000)}],
        )
        if result is None:
            return []
        if not isinstance(result, list):
            raise TransportError(f"Unexpected getSignaturesForAddress result: {result!r}")
        return result


def _context_value(result: Any, method: str) -> Any:
    """Unwrap ``{"context": ..., "value": ...}`` results."""
    if result is None:
        return None
    if not isinstance(result, dict):
        raise TransportError(f"Unexpected {method} result: {result!r}")
    return result.get("value")
