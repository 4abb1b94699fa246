"""Custom per-wallet buys.

The builder is asked once for bundles covering every wallet with its own
SOL amount. Each returned bundle is then a unit of its own: signed with
the held keys and forwarded through the trading server.
"""

from typing import Any, Dict, List, Optional, Sequence

from solana_multiwallet.clients.relay_client import BundleRelay, TradingServerRelay
from solana_multiwallet.constants import CUSTOM_BUY_ENDPOINT, MAX_BUY_SOL
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.bundles import UnsignedBundle
from solana_multiwallet.models.operations import OperationKind, Protocol
from solana_multiwallet.models.params import BundleParams, CustomBuyParams
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import ProtocolAdapter
from solana_multiwallet.utils.validation import is_positive_number, validate_public_key


class CustomBuyAdapter(ProtocolAdapter):
    """Signs and submits one pre-built bundle per unit."""

    kind = OperationKind.CUSTOM_BUY
    endpoint = CUSTOM_BUY_ENDPOINT

    def check_request(
        self,
        wallets: Sequence[WalletHandle],
        params: CustomBuyParams,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        """Validate the builder request before any bundle exists."""
        if not wallets:
            return "Please select at least one wallet"
        if not validate_public_key(params.token_address):
            return f"Invalid token address: {params.token_address}"
        for wallet in wallets:
            amount = params.amounts.get(wallet.address)
            if amount is None or not is_positive_number(amount, MAX_BUY_SOL):
                return f"Invalid SOL amount for wallet {wallet.short_address}"
            if balances.sol_of(wallet.address) < amount:
                return f"Wallet {wallet.short_address} has insufficient SOL balance"
        return None

    def build_payload(self, wallets: Sequence[WalletHandle], params: CustomBuyParams) -> Dict[str, Any]:
        return {
            "walletAddresses": [wallet.address for wallet in wallets],
            "tokenAddress": params.token_address,
            "solAmount": 0.1,  # ignored by the builder when amounts are given
            "protocol": Protocol.JUPITER.value,
            "amounts": [params.amounts[wallet.address] for wallet in wallets],
            "useRpc": params.use_rpc,
        }

    async def request_bundles(
        self,
        wallets: Sequence[WalletHandle],
        params: CustomBuyParams
    ) -> List[UnsignedBundle]:
        """Single builder round trip. Raises BuilderError on failure."""
        return await self.context.trading_client.build_bundles(
            self.endpoint,
            self.build_payload(wallets, params)
        )

    def check(
        self,
        wallets: Sequence[WalletHandle],
        params: BundleParams,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        if not params.bundle.transactions:
            return "Bundle has no transactions"
        return None

    async def build(self, wallets: Sequence[WalletHandle], params: BundleParams) -> List[UnsignedBundle]:
        return [params.bundle]

    def relay_for(self, params: BundleParams) -> BundleRelay:
        return TradingServerRelay(self.context.trading_client, use_rpc=params.use_rpc)
