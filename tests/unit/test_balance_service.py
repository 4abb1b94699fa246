"""Unit tests for the balance snapshot provider."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from solana_multiwallet.services.balance_service import BalanceService
from solana_multiwallet.utils.errors import RpcError
from tests.fixtures.common import TOKEN_MINT


@pytest.fixture
def rpc_client():
    client = MagicMock()
    client.get_balance = AsyncMock(return_value=1_500_000_000)
    client.get_token_balance = AsyncMock(return_value=42.0)
    return client


class TestBalanceService:
    """Test suite for BalanceService."""

    @pytest.mark.asyncio
    async def test_refresh_builds_snapshot(self, rpc_client, wallets):
        service = BalanceService(rpc_client)

        snapshot = await service.refresh(wallets, TOKEN_MINT)

        assert snapshot.token_address == TOKEN_MINT
        assert all(snapshot.sol_of(w.address) == pytest.approx(1.5) for w in wallets)
        assert all(snapshot.token_of(w.address) == 42.0 for w in wallets)

    @pytest.mark.asyncio
    async def test_sol_only_without_token(self, rpc_client, wallets):
        snapshot = await BalanceService(rpc_client).refresh(wallets)

        rpc_client.get_token_balance.assert_not_awaited()
        assert dict(snapshot.token) == {}

    @pytest.mark.asyncio
    async def test_failed_read_is_zero(self, rpc_client, wallets):
        rpc_client.get_balance.side_effect = [
            1_000_000_000, RpcError("node unavailable"), 2_000_000_000
        ]

        snapshot = await BalanceService(rpc_client, concurrency=1, cache_ttl=0).refresh(wallets)

        assert [snapshot.sol_of(w.address) for w in wallets] == [1.0, 0.0, 2.0]

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_wrapped(self, rpc_client):
        rpc_client.get_balance.side_effect = KeyError("value")

        with pytest.raises(RpcError):
            await BalanceService(rpc_client).fetch_sol_balance("addr")

    @pytest.mark.asyncio
    async def test_reads_are_cached_until_invalidated(self, rpc_client, wallets):
        service = BalanceService(rpc_client, cache_ttl=60)

        await service.refresh(wallets[:1])
        await service.refresh(wallets[:1])
        assert rpc_client.get_balance.await_count == 1

        service.invalidate()
        await service.refresh(wallets[:1])
        assert rpc_client.get_balance.await_count == 2

    @pytest.mark.asyncio
    async def test_duplicate_wallets_read_once(self, rpc_client, wallets):
        await BalanceService(rpc_client, cache_ttl=0).refresh([wallets[0], wallets[0]])

        assert rpc_client.get_balance.await_count == 1
