"""Shared pytest fixtures for wallet lookup tests.

This module provides fixtures for:
- A Config pointing at fake mainnet / devnet RPC URLs
- In-memory preference storage
- A JSON-RPC responder for respx routes

Usage:
    @pytest.mark.asyncio
    @respx.mock
    async def test_something(config, rpc_responder):
        respx.post(MAIN_RPC).mock(side_effect=rpc_responder({"getBalance": ...}))
"""

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from wallet_lookup.config import Config
from wallet_lookup.preferences import PreferenceStore
from wallet_lookup.storage import MemoryStore

MAIN_RPC = "https://main.rpc.test/rpc"
DEV_RPC = "https://dev.rpc.test/rpc"

WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config with fake endpoints and a throwaway storage path."""
    return Config(
        mainnet_rpc_url=MAIN_RPC,
        devnet_rpc_url=DEV_RPC,
        storage_path=tmp_path / "storage.json",
        rpc_timeout=5.0,
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def preferences(memory_store: MemoryStore) -> PreferenceStore:
    return PreferenceStore(memory_store)


def token_account(mint: str, ui_amount: float | None, ui_amount_string: str | None = None) -> dict[str, Any]:
    """A keyed account as returned by getTokenAccountsByOwner (jsonParsed)."""
    token_amount: dict[str, Any] = {"decimals": 6, "uiAmount": ui_amount}
    if ui_amount_string is not None:
        token_amount["uiAmountString"] = ui_amount_string
    return {
        "pubkey": "TokenAcct" + mint[:8],
        "account": {
            "data": {
                "program": "spl-token",
                "parsed": {
                    "type": "account",
                    "info": {
                        "mint": mint,
                        "owner": WALLET,
                        "tokenAmount": token_amount,
                    },
                },
            },
            "lamports": 2039280,
        },
    }


def signature_info(signature: str, block_time: int | None = 1704067200, err: Any = None) -> dict[str, Any]:
    """An item as returned by getSignaturesForAddress."""
    return {
        "signature": signature,
        "slot": 250000000,
        "blockTime": block_time,
        "err": err,
        "memo": None,
        "confirmationStatus": "finalized",
    }


@pytest.fixture
def rpc_results() -> dict[str, Any]:
    """Default successful results for the three lookup queries."""
    return {
        "getBalance": {"context": {"slot": 1}, "value": 5_000_000_000},
        "getTokenAccountsByOwner": {
            "context": {"slot": 1},
            "value": [
                token_account(USDC_MINT, 12.5, "12.5"),
                token_account(BONK_MINT, 0.0, "0"),
            ],
        },
        "getSignaturesForAddress": [
            signature_info("sig-newest", 1704070800),
            signature_info("sig-pending", None),
            signature_info("sig-failed", 1704067200, err={"InstructionError": [0, "Custom"]}),
        ],
    }


@pytest.fixture
def rpc_responder():
    """Build a respx side effect answering JSON-RPC calls by method name.

    Methods listed in ``errors`` answer with a JSON-RPC error object.
    Every request body is appended to ``calls`` when given.
    """
    def build(
        results: dict[str, Any],
        errors: dict[str, str] | None = None,
        calls: list[dict[str, Any]] | None = None,
    ):
        errors = errors or {}

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            if calls is not None:
                calls.append(body)
            method = body["method"]
            if method in errors:
                return httpx.Response(200, json={
                    "jsonrpc": "2.0",
                    "id": body["id"],
                    "error": {"code": -32602, "message": errors[method]},
                })
            return httpx.Response(200, json={
                "jsonrpc": "2.0",
                "id": body["id"],
                "result": results[method],
            })

        return handler

    return build
