"""Spread SOL from one sender to many recipients."""

from typing import Any, Dict, Optional, Sequence

from solana_multiwallet.clients.relay_client import BundleRelay
from solana_multiwallet.constants import DISTRIBUTE_ENDPOINT
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.operations import OperationKind
from solana_multiwallet.models.params import DistributeParams
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import ProtocolAdapter
from solana_multiwallet.utils.validation import is_positive_number, validate_public_key


class DistributeAdapter(ProtocolAdapter):
    """``wallets[0]`` pays; ``params.amounts`` maps recipients to SOL."""

    kind = OperationKind.DISTRIBUTE
    endpoint = DISTRIBUTE_ENDPOINT

    def check(
        self,
        wallets: Sequence[WalletHandle],
        params: DistributeParams,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        sender = wallets[0]
        if not params.amounts:
            return "Please select at least one recipient"
        for address, amount in params.amounts.items():
            if not validate_public_key(address):
                return f"Invalid recipient address: {address}"
            if address == sender.address:
                return "Sender cannot be a recipient"
            if not is_positive_number(amount):
                return f"Invalid amount for recipient {address}"
        total = sum(params.amounts.values())
        if total > balances.sol_of(sender.address):
            return f"Total amount ({total:g} SOL) exceeds sender balance"
        return None

    def build_payload(self, wallets: Sequence[WalletHandle], params: DistributeParams) -> Dict[str, Any]:
        return {
            "senderAddress": wallets[0].address,
            "recipients": [
                {"address": address, "amount": str(amount)}
                for address, amount in params.amounts.items()
            ],
        }

    def relay_for(self, params: DistributeParams) -> BundleRelay:
        return self.context.rpc_relay
