"""Balance snapshot provider.

Balances are read concurrently before a batch and joined into an immutable
BalanceSnapshot. Values are best-effort: a wallet whose read fails is
logged and reported as zero, and recent reads are served from a short TTL
cache.
"""

from typing import Optional, Sequence, Tuple

from cachetools import TTLCache

from solana_multiwallet.clients.rpc_client import SolanaRpcClient
from solana_multiwallet.constants import LAMPORTS_PER_SOL
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.base_service import BaseService, handle_errors
from solana_multiwallet.utils.batching import batch_process_requests
from solana_multiwallet.utils.errors import RpcError

_SOL_KEY = "SOL"


class BalanceService(BaseService):
    """Fetches SOL and token balances for a set of wallets."""

    def __init__(
        self,
        rpc_client: SolanaRpcClient,
        concurrency: int = 10,
        cache_ttl: float = 5.0,
        cache_size: int = 4096
    ):
        super().__init__()
        self.rpc_client = rpc_client
        self.concurrency = concurrency
        self._cache: Optional[TTLCache] = TTLCache(maxsize=cache_size, ttl=cache_ttl) if cache_ttl > 0 else None

    def invalidate(self) -> None:
        """Drop cached balances, e.g. after a batch changed them."""
        if self._cache is not None:
            self._cache.clear()

    @handle_errors(RpcError)
    async def fetch_sol_balance(self, address: str) -> float:
        lamports = await self.rpc_client.get_balance(address)
        return lamports / LAMPORTS_PER_SOL

    @handle_errors(RpcError)
    async def fetch_token_balance(self, address: str, mint: str) -> float:
        return await self.rpc_client.get_token_balance(address, mint)

    async def _read(self, key: Tuple[str, str]) -> float:
        if self._cache is not None and key in self._cache:
            return self._cache[key]
        address, asset = key
        if asset == _SOL_KEY:
            value = await self.fetch_sol_balance(address)
        else:
            value = await self.fetch_token_balance(address, asset)
        if self._cache is not None:
            self._cache[key] = value
        return value

    async def refresh(
        self,
        wallets: Sequence[WalletHandle],
        token_address: Optional[str] = None
    ) -> BalanceSnapshot:
        """Read balances for ``wallets`` and join them into a snapshot.

        Args:
            wallets: Wallets to read
            token_address: Also read this token's balances when given

        Returns:
            BalanceSnapshot; failed reads appear as 0
        """
        addresses = list(dict.fromkeys(wallet.address for wallet in wallets))
        keys = [(address, _SOL_KEY) for address in addresses]
        if token_address:
            keys += [(address, token_address) for address in addresses]

        async with self.log_timing(f"Balance refresh for {len(addresses)} wallet(s)"):
            results = await batch_process_requests(self._read, keys, concurrency=self.concurrency)

        sol = {}
        token = {}
        for (address, asset), result in zip(keys, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                self.logger.warning(f"Balance read failed for {address} ({asset}): {result}")
                result = 0.0
            if asset == _SOL_KEY:
                sol[address] = result
            else:
                token[address] = result

        return BalanceSnapshot(sol=sol, token=token, token_address=token_address)
