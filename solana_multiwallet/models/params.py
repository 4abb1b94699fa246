"""Parameter objects handed to adapters."""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from solana_multiwallet.constants import DEFAULT_SLIPPAGE_BPS
from solana_multiwallet.models.bundles import UnsignedBundle


@dataclass(frozen=True)
class TradeParams:
    """Buy/sell parameters.

    ``amount`` is SOL per wallet for a buy and a percentage of the token
    holding for a sell.
    """

    token_address: str
    amount: float
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS


@dataclass(frozen=True)
class FanOutParams:
    """One seller/buyer leg of a fan-out."""

    token_address: str
    seller_share: float  # seller_percentage divided across the seller's buyers
    buy_percentage: float
    seller_percentage: float


@dataclass(frozen=True)
class BundleParams:
    """A pre-built bundle awaiting signature and submission."""

    bundle: UnsignedBundle
    use_rpc: bool = False


@dataclass(frozen=True)
class CustomBuyParams:
    token_address: str
    amounts: Mapping[str, float]  # wallet address -> SOL
    use_rpc: bool = False


@dataclass(frozen=True)
class TransferParams:
    """Move SOL (no token address) or a token to ``receiver``."""

    receiver: str
    amount: float
    token_address: Optional[str] = None


@dataclass(frozen=True)
class BurnParams:
    token_address: str
    amount: float


@dataclass(frozen=True)
class DistributeParams:
    """SOL amounts per recipient address, paid by the first wallet."""

    amounts: Mapping[str, float]


@dataclass(frozen=True)
class ConsolidateParams:
    receiver: str
    percentage: float


@dataclass(frozen=True)
class TokenMetadata:
    name: str
    symbol: str
    description: str = ""
    telegram: str = ""
    twitter: str = ""
    website: str = ""
    file: str = ""  # image URI


@dataclass(frozen=True)
class DeployParams:
    """Token creation; ``amounts`` lines up with the participating wallets."""

    metadata: TokenMetadata
    amounts: Tuple[float, ...]
    mint_address: Optional[str] = None
    options: Mapping[str, object] = field(default_factory=dict)
