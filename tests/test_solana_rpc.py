"""Unit tests for SolanaRPCClient.

Tests the JSON-RPC envelope, error mapping and the query wrappers
with mocked HTTP responses using respx.
"""

import json

import httpx
import pytest
import respx

from tests.conftest import MAIN_RPC, WALLET
from wallet_lookup.api.base import RemoteError, TransportError
from wallet_lookup.api.solana_rpc import SolanaRPCClient
from wallet_lookup.resolvers import TOKEN_PROGRAM_ID


@pytest.fixture
def rpc_client():
    return SolanaRPCClient(MAIN_RPC, timeout=5.0)


def test_defaults_to_public_mainnet():
    client = SolanaRPCClient()
    assert client.rpc_url == "https://api.mainnet-beta.solana.com"
    assert client.timeout == 30.0


@pytest.mark.asyncio
@respx.mock
async def test_call_sends_jsonrpc_envelope(rpc_client):
    """A call is one POST with a JSON-RPC 2.0 body."""
    route = respx.post(MAIN_RPC).mock(
        return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": 42})
    )

    result = await rpc_client.call("getSlot", [])

    assert result == 42
    assert route.call_count == 1
    request = route.calls.last.request
    assert request.headers["content-type"] == "application/json"
    body = json.loads(request.content)
    assert body["jsonrpc"] == "2.0"
    assert body["method"] == "getSlot"
    assert body["params"] == []
    assert "id" in body

    await rpc_client.close()


@pytest.mark.asyncio
@respx.mock
async def test_request_ids_are_never_reused(rpc_client):
    route = respx.post(MAIN_RPC).mock(
        return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 0, "result": None})
    )
    other = SolanaRPCClient(MAIN_RPC)

    for _ in range(3):
        await rpc_client.call("getSlot", [])
        await other.call("getSlot", [])

    ids = [json.loads(call.request.content)["id"] for call in route.calls]
    assert len(ids) == 6
    assert len(set(ids)) == 6

    await rpc_client.close()
    await other.close()


@pytest.mark.asyncio
@respx.mock
async def test_error_envelope_raises_remote_error(rpc_client):
    respx.post(MAIN_RPC).mock(return_value=httpx.Response(200, json={
        "jsonrpc": "2.0",
        "id": 1,
        "error": {"code": -32602, "message": "Invalid param: WrongSize"},
    }))

    with pytest.raises(RemoteError) as exc_info:
        await rpc_client.call("getBalance", ["nope"])

    assert str(exc_info.value) == "Invalid param: WrongSize"
    assert exc_info.value.code == -32602

    await rpc_client.close()


@pytest.mark.asyncio
@respx.mock
async def test_error_envelope_on_http_error_status_is_remote_error(rpc_client):
    respx.post(MAIN_RPC).mock(return_value=httpx.Response(429, json={
        "jsonrpc": "2.0",
        "id": 1,
        "error": {"code": 429, "message": "Too many requests for a specific RPC call"},
    }))

    with pytest.raises(RemoteError, match="Too many requests"):
        await rpc_client.call("getBalance", [WALLET])

    await rpc_client.close()


@pytest.mark.asyncio
@respx.mock
async def test_connection_failure_raises_transport_error(rpc_client):
    respx.post(MAIN_RPC).mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(TransportError, match="Request failed"):
        await rpc_client.call("getBalance", [WALLET])

    await rpc_client.close()


@pytest.mark.asyncio
@respx.mock
async def test_timeout_raises_transport_error(rpc_client):
    respx.post(MAIN_RPC).mock(side_effect=httpx.ReadTimeout("too slow"))

    with pytest.raises(TransportError, match="timed out"):
        await rpc_client.call("getBalance", [WALLET])

    await rpc_client.close()


@pytest.mark.asyncio
@respx.mock
async def test_malformed_body_raises_transport_error(rpc_client):
    respx.post(MAIN_RPC).mock(return_value=httpx.Response(502, text="<html>Bad Gateway</html>"))

    with pytest.raises(TransportError) as exc_info:
        await rpc_client.call("getBalance", [WALLET])

    assert exc_info.value.status_code == 502

    await rpc_client.close()


@pytest.mark.asyncio
@respx.mock
async def test_envelope_without_result_raises_transport_error(rpc_client):
    respx.post(MAIN_RPC).mock(return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1}))

    with pytest.raises(TransportError):
        await rpc_client.call("getBalance", [WALLET])

    await rpc_client.close()


@pytest.mark.asyncio
@respx.mock
async def test_query_wrappers_send_expected_params(rpc_client, rpc_results, rpc_responder):
    calls = []
    respx.post(MAIN_RPC).mock(side_effect=rpc_responder(rpc_results, calls=calls))

    lamports = await rpc_client.get_balance(WALLET)
    accounts = await rpc_client.get_token_accounts_by_owner(WALLET, TOKEN_PROGRAM_ID)
    signatures = await rpc_client.get_signatures_for_address(WALLET, limit=10)

    assert lamports == 5_000_000_000
    assert len(accounts) == 2
    assert len(signatures) == 3

    assert calls[0]["params"] == [WALLET]
    assert calls[1]["params"] == [
        WALLET,
        {"programId": TOKEN_PROGRAM_ID},
        {"encoding": "jsonParsed"},
    ]
    assert calls[2]["params"] == [WALLET, {"limit": 10}]

    await rpc_client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("method_name, args, result", [
    ("get_balance", (WALLET,), [5_000_000_000]),
    ("get_token_accounts_by_owner", (WALLET, TOKEN_PROGRAM_ID), "not an object"),
    ("get_signatures_for_address", (WALLET,), {"value": []}),
])
@respx.mock
async def test_malformed_result_raises_transport_error(rpc_client, method_name, args, result):
    respx.post(MAIN_RPC).mock(
        return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})
    )

    with pytest.raises(TransportError, match="Unexpected"):
        await getattr(rpc_client, method_name)(*args)

    await rpc_client.close()
