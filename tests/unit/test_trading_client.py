"""Unit tests for the trading server client."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from solana_multiwallet.clients.base_client import backoff_delay
from solana_multiwallet.clients.trading_client import TradingServerClient, normalize_bundles
from solana_multiwallet.config import TradingServerConfig
from solana_multiwallet.utils.errors import BuilderError


class TestNormalizeBundles:
    """Test suite for builder response normalization."""

    def test_bundles_as_list_of_lists(self):
        bundles = normalize_bundles({"success": True, "bundles": [["a", "b"], ["c"]]})

        assert [b.transactions for b in bundles] == [("a", "b"), ("c",)]

    def test_bundles_as_objects(self):
        body = {"bundles": [{"transactions": ["a"]}, {"transactions": ["b", "c"]}]}

        assert [b.transactions for b in normalize_bundles(body)] == [("a",), ("b", "c")]

    def test_flat_transactions(self):
        assert normalize_bundles({"transactions": ["a", "b"]})[0].transactions == ("a", "b")

    def test_single_transaction(self):
        assert normalize_bundles({"transaction": "a"})[0].transactions == ("a",)

    def test_data_envelope(self):
        body = {"success": True, "data": {"bundles": [["a"]]}}

        assert normalize_bundles(body)[0].transactions == ("a",)

    def test_raw_list(self):
        assert normalize_bundles(["a", "b"])[0].transactions == ("a", "b")

    def test_empty_bundles_are_dropped(self):
        bundles = normalize_bundles({"bundles": [[], ["a"]]})

        assert len(bundles) == 1

    @pytest.mark.parametrize("body", [
        {"success": True},
        {"bundles": []},
        {"bundles": [[]]},
        {"transactions": []},
        [],
    ])
    def test_nothing_usable(self, body):
        with pytest.raises(BuilderError) as exc_info:
            normalize_bundles(body)
        assert exc_info.value.message == "No transactions returned from backend"

    def test_reported_failure(self):
        with pytest.raises(BuilderError) as exc_info:
            normalize_bundles({"success": False, "error": "Token not tradable"})
        assert exc_info.value.message == "Token not tradable"

    def test_reported_failure_with_error_object(self):
        with pytest.raises(BuilderError) as exc_info:
            normalize_bundles({"success": False, "error": {"message": "Insufficient liquidity"}})
        assert exc_info.value.message == "Insufficient liquidity"

    def test_malformed_envelope_is_a_builder_error(self):
        with pytest.raises(BuilderError):
            normalize_bundles({"success": "sometimes", "bundles": [["a"]]})

    def test_malformed_bundle_item(self):
        with pytest.raises(BuilderError):
            normalize_bundles({"bundles": [{"foo": 1}]})


def _client(handler, **config):
    transport = httpx.MockTransport(handler)
    return TradingServerClient(
        config=TradingServerConfig(base_url="localhost:8888", **config),
        http_client=httpx.AsyncClient(transport=transport)
    )


class TestTradingServerClient:
    """Test suite for TradingServerClient."""

    def test_local_host_uses_http(self):
        client = TradingServerClient(config=TradingServerConfig(base_url="localhost:8888"))
        assert client.base_url == "http://localhost:8888"

    def test_remote_host_uses_https(self):
        client = TradingServerClient(config=TradingServerConfig(base_url="http://builder.example.com/"))
        assert client.base_url == "https://builder.example.com"

    @pytest.mark.asyncio
    async def test_build_bundles_posts_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            seen["api_key"] = request.headers.get("X-API-Key")
            return httpx.Response(200, json={"success": True, "bundles": [["tx1", "tx2"]]})

        async with _client(handler, api_key="secret") as client:
            bundles = await client.build_bundles("/api/tokens/buy", {"tokenAddress": "mint"})

        assert seen["url"] == "http://localhost:8888/api/tokens/buy"
        assert seen["body"] == {"tokenAddress": "mint"}
        assert seen["api_key"] == "secret"
        assert bundles[0].transactions == ("tx1", "tx2")

    @pytest.mark.asyncio
    async def test_error_body_becomes_builder_error(self):
        def handler(request):
            return httpx.Response(400, json={"error": "Invalid amount"})

        async with _client(handler) as client:
            with pytest.raises(BuilderError) as exc_info:
                await client.build_bundles("/api/tokens/buy", {})

        assert exc_info.value.message == "Invalid amount"
        assert exc_info.value.details["status_code"] == 400

    @pytest.mark.asyncio
    async def test_structured_rejection_with_ok_status(self):
        def handler(request):
            return httpx.Response(200, json={"success": False, "error": {"message": "Insufficient liquidity"}})

        async with _client(handler) as client:
            with pytest.raises(BuilderError) as exc_info:
                await client.build_bundles("/api/tokens/buy", {})

        assert exc_info.value.message == "Insufficient liquidity"

    @pytest.mark.asyncio
    async def test_error_object_in_http_error_body(self):
        def handler(request):
            return httpx.Response(422, json={"error": {"message": "Amount too small"}})

        async with _client(handler) as client:
            with pytest.raises(BuilderError) as exc_info:
                await client.build_bundles("/api/tokens/buy", {})

        assert exc_info.value.message == "Amount too small"

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>")

        async with _client(handler) as client:
            with pytest.raises(BuilderError):
                await client.build_bundles("/api/tokens/buy", {})

    @pytest.mark.asyncio
    async def test_retriable_status_is_retried(self):
        responses = [
            httpx.Response(503, json={"error": "busy"}),
            httpx.Response(200, json={"transactions": ["tx"]}),
        ]

        def handler(request):
            return responses.pop(0)

        with patch("solana_multiwallet.clients.base_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
            async with _client(handler, max_retries=2) as client:
                bundles = await client.build_bundles("/api/tokens/buy", {})

        assert bundles[0].transactions == ("tx",)
        sleep.assert_awaited_once_with(backoff_delay(0))

    @pytest.mark.asyncio
    async def test_retries_are_bounded(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502, json={"error": "bad gateway"})

        with patch("solana_multiwallet.clients.base_client.asyncio.sleep", new_callable=AsyncMock):
            async with _client(handler, max_retries=2) as client:
                with pytest.raises(BuilderError):
                    await client.build_bundles("/api/tokens/buy", {})

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_send_transactions_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(json.loads(request.content))
            return httpx.Response(503, json={"error": "busy"})

        async with _client(handler, max_retries=3) as client:
            with pytest.raises(BuilderError):
                await client.send_transactions(["tx"], use_rpc=True)

        assert calls == [{"transactions": ["tx"], "useRpc": True}]

    @pytest.mark.asyncio
    async def test_send_transactions_reported_failure(self):
        def handler(request):
            return httpx.Response(200, json={"success": False, "error": "Blockhash expired"})

        async with _client(handler) as client:
            with pytest.raises(BuilderError) as exc_info:
                await client.send_transactions(["tx"])

        assert exc_info.value.message == "Blockhash expired"

    @pytest.mark.asyncio
    async def test_generate_mint(self):
        def handler(request):
            assert request.method == "GET"
            return httpx.Response(200, json={"success": True, "data": {"pubkey": "MintPubkey111"}})

        async with _client(handler) as client:
            assert await client.generate_mint() == "MintPubkey111"

    @pytest.mark.asyncio
    async def test_generate_mint_without_pubkey(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "data": {}})

        async with _client(handler) as client:
            with pytest.raises(BuilderError):
                await client.generate_mint()


def test_backoff_is_capped():
    assert backoff_delay(0) == 1
    assert backoff_delay(2) == 4
    assert backoff_delay(10) == 10
