"""Wallet capacity validation.

Every operation kind has a static ceiling on how many active wallets may
take part in it. A kind without a ceiling reads as 0, so it is always
rejected rather than silently allowed.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence

from solana_multiwallet.logging_config import get_logger
from solana_multiwallet.models.operations import OperationKind
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.utils.errors import ConfigurationError

logger = get_logger(__name__)

K = OperationKind

CAPACITY_TABLE: Mapping[OperationKind, int] = MappingProxyType({
    K.BUY_RAYDIUM: 120,
    K.SELL_RAYDIUM: 120,
    K.BUY_JUPITER: 120,
    K.SELL_JUPITER: 120,
    K.BUY_PUMPSWAP: 120,
    K.SELL_PUMPSWAP: 120,
    K.BUY_PUMPFUN: 140,
    K.SELL_PUMPFUN: 180,
    K.BUY_MOONSHOT: 160,
    K.SELL_MOONSHOT: 160,
    K.BUY_LAUNCHPAD: 160,
    K.SELL_LAUNCHPAD: 160,
    K.BUY_BOOPFUN: 140,
    K.SELL_BOOPFUN: 180,
    K.FAN_OUT: 120,
    K.CUSTOM_BUY: 120,
    K.TRANSFER: 120,
    K.BURN: 120,
    K.DISTRIBUTE: 120,
    K.CONSOLIDATE: 120,
    K.DEPLOY_PUMP: 5,
    K.DEPLOY_BONK: 5,
    K.DEPLOY_BOOP: 15,
})


@dataclass(frozen=True)
class CapacityCheck:
    """Result of a capacity validation."""

    ok: bool
    active_count: int
    ceiling: int
    kind: OperationKind

    @property
    def message(self) -> str:
        if self.ok:
            return f"Valid: {self.active_count} active wallets (max {self.ceiling})"
        return (
            f"Error: Too many active wallets ({self.active_count}). "
            f"Maximum allowed for {self.kind.value} is {self.ceiling}"
        )


def count_active_wallets(wallets: Iterable[WalletHandle]) -> int:
    return sum(1 for wallet in wallets if wallet.is_active)


def get_active_wallets(wallets: Iterable[WalletHandle]) -> List[WalletHandle]:
    return [wallet for wallet in wallets if wallet.is_active]


def ceiling_for(kind: OperationKind, table: Optional[Mapping[OperationKind, int]] = None) -> int:
    table = CAPACITY_TABLE if table is None else table
    return table.get(kind, 0)


def validate_capacity(
    wallets: Sequence[WalletHandle],
    kind: OperationKind,
    table: Optional[Mapping[OperationKind, int]] = None
) -> CapacityCheck:
    """Check the active wallet count against the ceiling for ``kind``.

    Args:
        wallets: Wallets under consideration; inactive ones are not counted
        kind: Operation kind
        table: Ceiling table, defaults to CAPACITY_TABLE

    Returns:
        CapacityCheck; this function never raises
    """
    active_count = count_active_wallets(wallets)
    ceiling = ceiling_for(kind, table)
    return CapacityCheck(
        ok=active_count <= ceiling,
        active_count=active_count,
        ceiling=ceiling,
        kind=kind,
    )


def check_capacity_coverage(
    kinds: Iterable[OperationKind],
    table: Optional[Mapping[OperationKind, int]] = None
) -> None:
    """Make sure every kind has a configured ceiling.

    Raises:
        ConfigurationError: Listing the kinds without one
    """
    table = CAPACITY_TABLE if table is None else table
    missing = sorted(kind.value for kind in kinds if kind not in table)
    if missing:
        logger.error(f"No capacity ceiling configured for: {', '.join(missing)}")
        raise ConfigurationError(
            f"No capacity ceiling configured for: {', '.join(missing)}",
            details={"kinds": missing}
        )
