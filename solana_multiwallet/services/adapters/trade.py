"""Buy/sell adapters for the swap and bonding-curve protocols."""

from typing import Any, Dict, Optional, Sequence

from solana_multiwallet.constants import MAX_BUY_SOL, TRADE_ENDPOINT
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.operations import Direction, OperationKind, Protocol
from solana_multiwallet.models.params import TradeParams
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import AdapterContext, ProtocolAdapter
from solana_multiwallet.utils.validation import (
    is_positive_number,
    is_valid_percentage,
    validate_public_key,
)


class TradeAdapter(ProtocolAdapter):
    """Buy or sell one token across every participating wallet in one call."""

    protocol: Protocol

    def __init__(self, context: AdapterContext, protocol: Protocol, direction: Direction):
        super().__init__(context)
        self.protocol = Protocol(protocol)
        self.direction = Direction(direction)
        self.kind = OperationKind.for_trade(self.protocol, self.direction)
        self.endpoint = TRADE_ENDPOINT.format(
            protocol=self.protocol.value,
            direction=self.direction.value
        )

    def check(
        self,
        wallets: Sequence[WalletHandle],
        params: TradeParams,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        if not validate_public_key(params.token_address):
            return f"Invalid token address: {params.token_address}"
        if self.direction is Direction.BUY:
            if not is_positive_number(params.amount, MAX_BUY_SOL):
                return f"SOL amount must be greater than 0 and at most {MAX_BUY_SOL:g}"
            for wallet in wallets:
                if balances.sol_of(wallet.address) < params.amount:
                    return f"Wallet {wallet.short_address} has insufficient SOL balance"
        else:
            if not is_valid_percentage(params.amount):
                return "Sell percentage must be greater than 0 and at most 100"
            for wallet in wallets:
                if balances.token_of(wallet.address) <= 0:
                    return f"Wallet {wallet.short_address} has no token balance"
        return None

    def build_payload(self, wallets: Sequence[WalletHandle], params: TradeParams) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "walletAddresses": [wallet.address for wallet in wallets],
            "tokenAddress": params.token_address,
            "slippageBps": params.slippage_bps,
        }
        if self.direction is Direction.BUY:
            payload["solAmount"] = params.amount
        else:
            payload["sellPercent"] = params.amount
        payload.update(self.protocol_fields(params))
        return payload

    def protocol_fields(self, params: TradeParams) -> Dict[str, Any]:
        """Extra builder fields specific to a protocol."""
        return {}
