"""SOL and token transfers from one source wallet."""

from typing import Any, Dict, Optional, Sequence

from solana_multiwallet.clients.relay_client import BundleRelay
from solana_multiwallet.constants import TRANSFER_ENDPOINT
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.operations import OperationKind
from solana_multiwallet.models.params import TransferParams
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import ProtocolAdapter
from solana_multiwallet.utils.validation import is_positive_number, validate_public_key


class TransferAdapter(ProtocolAdapter):
    kind = OperationKind.TRANSFER
    endpoint = TRANSFER_ENDPOINT

    def check(
        self,
        wallets: Sequence[WalletHandle],
        params: TransferParams,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        source = wallets[0]
        if not validate_public_key(params.receiver):
            return f"Invalid receiver address: {params.receiver}"
        if params.receiver == source.address:
            return "Sender and receiver must differ"
        if params.token_address is not None and not validate_public_key(params.token_address):
            return f"Invalid token address: {params.token_address}"
        if not is_positive_number(params.amount):
            return "Amount must be greater than 0"
        if params.token_address is None:
            if balances.sol_of(source.address) < params.amount:
                return f"Wallet {source.short_address} has insufficient SOL balance"
        elif balances.token_of(source.address) < params.amount:
            return f"Wallet {source.short_address} has insufficient token balance"
        return None

    def build_payload(self, wallets: Sequence[WalletHandle], params: TransferParams) -> Dict[str, Any]:
        return {
            "senderPublicKey": wallets[0].address,
            "receiver": params.receiver,
            "tokenAddress": params.token_address or "",
            "amount": str(params.amount),
        }

    def relay_for(self, params: TransferParams) -> BundleRelay:
        return self.context.rpc_relay
