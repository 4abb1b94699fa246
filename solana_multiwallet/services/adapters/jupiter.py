"""Jupiter aggregator adapter."""

from typing import Any, Dict

from solana_multiwallet.constants import SOL_MINT
from solana_multiwallet.models.operations import Direction
from solana_multiwallet.models.params import TradeParams
from solana_multiwallet.services.adapters.trade import TradeAdapter


class JupiterTradeAdapter(TradeAdapter):
    """Routes SOL <-> token swaps through Jupiter quotes."""

    def protocol_fields(self, params: TradeParams) -> Dict[str, Any]:
        if self.direction is Direction.BUY:
            input_mint, output_mint = SOL_MINT, params.token_address
        else:
            input_mint, output_mint = params.token_address, SOL_MINT
        return {
            "inputMint": input_mint,
            "outputMint": output_mint,
        }
