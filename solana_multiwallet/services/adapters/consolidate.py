"""Sweep a percentage of SOL from a source wallet into one receiver."""

from typing import Any, Dict, Optional, Sequence

from solana_multiwallet.clients.relay_client import BundleRelay
from solana_multiwallet.constants import CONSOLIDATE_ENDPOINT
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.operations import OperationKind
from solana_multiwallet.models.params import ConsolidateParams
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import ProtocolAdapter
from solana_multiwallet.utils.validation import is_valid_percentage, validate_public_key


class ConsolidateAdapter(ProtocolAdapter):
    kind = OperationKind.CONSOLIDATE
    endpoint = CONSOLIDATE_ENDPOINT

    def check(
        self,
        wallets: Sequence[WalletHandle],
        params: ConsolidateParams,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        source = wallets[0]
        if not validate_public_key(params.receiver):
            return f"Invalid receiver address: {params.receiver}"
        if source.address == params.receiver:
            return "Source wallet cannot be the receiver"
        if not is_valid_percentage(params.percentage):
            return "Percentage must be greater than 0 and at most 100"
        if balances.sol_of(source.address) <= 0:
            return f"Wallet {source.short_address} has no SOL balance"
        return None

    def build_payload(self, wallets: Sequence[WalletHandle], params: ConsolidateParams) -> Dict[str, Any]:
        return {
            "sourceAddresses": [wallet.address for wallet in wallets],
            "receiverAddress": params.receiver,
            "percentage": params.percentage,
        }

    def relay_for(self, params: ConsolidateParams) -> BundleRelay:
        return self.context.rpc_relay
