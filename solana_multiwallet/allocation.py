"""Fan-out allocation.

A seller releasing X% of a holding splits it equally across its buyers.
The buyers' own buy percentages never enter this math; they are forwarded
to the buy leg untouched.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from solana_multiwallet.models.operations import SellerConfig
from solana_multiwallet.models.wallet import WalletHandle


def allocate(sell_percentage: float, buyer_count: int) -> float:
    """Per-buyer share of a seller's released percentage.

    Callers guarantee ``buyer_count >= 1`` and ``0 < sell_percentage <= 100``.
    """
    return sell_percentage / buyer_count


@dataclass(frozen=True)
class FanOutLeg:
    """One planned seller/buyer unit.

    ``buyer`` is None when the seller was configured without buyers; such a
    leg exists only to be rejected in pre-flight.
    """

    seller: WalletHandle
    buyer: Optional[WalletHandle]
    seller_share: float
    buy_percentage: float
    seller_percentage: float

    @property
    def label(self) -> str:
        buyer = self.buyer.short_address if self.buyer else "<no buyer>"
        return f"{self.seller.short_address} -> {buyer}"


def plan_fan_out(sellers: Sequence[SellerConfig]) -> List[FanOutLeg]:
    """Expand seller configs into ordered seller/buyer legs.

    Order follows the configuration: sellers in list order, and each
    seller's buyers in their list order.
    """
    legs: List[FanOutLeg] = []
    for seller in sellers:
        if not seller.buyers:
            legs.append(FanOutLeg(
                seller=seller.wallet,
                buyer=None,
                seller_share=0.0,
                buy_percentage=0.0,
                seller_percentage=seller.sell_percentage,
            ))
            continue
        share = allocate(seller.sell_percentage, len(seller.buyers))
        for buyer in seller.buyers:
            legs.append(FanOutLeg(
                seller=seller.wallet,
                buyer=buyer.wallet,
                seller_share=share,
                buy_percentage=buyer.buy_percentage,
                seller_percentage=seller.sell_percentage,
            ))
    return legs
