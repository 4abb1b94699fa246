"""Seller/buyer fan-out adapter.

One unit moves the seller's allocated share of a token holding to a single
buyer wallet; the buyer's own percentage is forwarded to the buy leg as is.
"""

from typing import Any, Dict, Optional, Sequence

from solana_multiwallet.constants import CLEANER_ENDPOINT
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.operations import OperationKind
from solana_multiwallet.models.params import FanOutParams
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import ProtocolAdapter
from solana_multiwallet.utils.validation import is_valid_percentage, validate_public_key


class FanOutAdapter(ProtocolAdapter):
    """Expects ``wallets`` as ``(seller, buyer)``."""

    kind = OperationKind.FAN_OUT
    endpoint = CLEANER_ENDPOINT

    def check(
        self,
        wallets: Sequence[WalletHandle],
        params: FanOutParams,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        if len(wallets) != 2:
            return "Seller has no buyer wallets configured"
        seller, buyer = wallets
        if seller.address == buyer.address:
            return f"Seller {seller.short_address} cannot buy from itself"
        if not validate_public_key(params.token_address):
            return f"Invalid token address: {params.token_address}"
        if not is_valid_percentage(params.seller_percentage):
            return "Seller percentage must be greater than 0 and at most 100"
        if not is_valid_percentage(params.buy_percentage):
            return "Buyer percentage must be greater than 0 and at most 100"
        if balances.sol_of(seller.address) <= 0:
            return f"Seller {seller.short_address} has no SOL for fees"
        if balances.token_of(seller.address) <= 0:
            return f"Seller {seller.short_address} has no token balance"
        return None

    def build_payload(self, wallets: Sequence[WalletHandle], params: FanOutParams) -> Dict[str, Any]:
        seller, buyer = wallets
        return {
            "sellerAddress": seller.address,
            "buyerAddress": buyer.address,
            "tokenAddress": params.token_address,
            "sellPercentage": params.seller_share,
            "buyPercentage": params.buy_percentage,
        }
