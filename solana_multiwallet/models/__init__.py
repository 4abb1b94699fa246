"""Domain and wire models."""

from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.bundles import (
    PayloadFailure,
    SignedBundle,
    SigningResult,
    UnsignedBundle,
)
from solana_multiwallet.models.operations import (
    BatchReport,
    BuyerConfig,
    Direction,
    LaunchPlatform,
    OperationKind,
    OperationResult,
    Protocol,
    SellerConfig,
    UnitOutcome,
    ValidationResult,
)
from solana_multiwallet.models.wallet import WalletHandle, load_wallets

__all__ = [
    "BalanceSnapshot",
    "BatchReport",
    "BuyerConfig",
    "Direction",
    "LaunchPlatform",
    "OperationKind",
    "OperationResult",
    "PayloadFailure",
    "Protocol",
    "SellerConfig",
    "SignedBundle",
    "SigningResult",
    "UnitOutcome",
    "UnsignedBundle",
    "ValidationResult",
    "WalletHandle",
    "load_wallets",
]
