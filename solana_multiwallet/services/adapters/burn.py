"""Token burn adapter."""

from typing import Any, Dict, Optional, Sequence

from solana_multiwallet.constants import BURN_ENDPOINT
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.operations import OperationKind
from solana_multiwallet.models.params import BurnParams
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import ProtocolAdapter
from solana_multiwallet.utils.validation import is_positive_number, validate_public_key


class BurnAdapter(ProtocolAdapter):
    kind = OperationKind.BURN
    endpoint = BURN_ENDPOINT

    def check(
        self,
        wallets: Sequence[WalletHandle],
        params: BurnParams,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        if len(wallets) != 1:
            return "Burn takes exactly one wallet"
        if not validate_public_key(params.token_address):
            return f"Invalid token address: {params.token_address}"
        if not is_positive_number(params.amount):
            return "Amount must be greater than 0"
        if balances.token_of(wallets[0].address) < params.amount:
            return f"Wallet {wallets[0].short_address} has insufficient token balance"
        return None

    def build_payload(self, wallets: Sequence[WalletHandle], params: BurnParams) -> Dict[str, Any]:
        return {
            "walletPublicKey": wallets[0].address,
            "tokenAddress": params.token_address,
            "amount": str(params.amount),
        }
