"""Operation models: kinds, per-unit results and batch reports."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.utils.errors import ConfigurationError


class Protocol(str, Enum):
    """Execution backends for buy/sell operations."""

    PUMPFUN = "pumpfun"
    MOONSHOT = "moonshot"
    PUMPSWAP = "pumpswap"
    RAYDIUM = "raydium"
    JUPITER = "jupiter"
    LAUNCHPAD = "launchpad"
    BOOPFUN = "boopfun"


class Direction(str, Enum):
    """Side of a trade."""

    BUY = "buy"
    SELL = "sell"


class LaunchPlatform(str, Enum):
    """Token creation backends."""

    PUMP = "pump"
    BONK = "bonk"
    BOOP = "boop"


class OperationKind(str, Enum):
    """Tag selecting both a capacity ceiling and an adapter."""

    BUY_PUMPFUN = "buy@pumpfun"
    SELL_PUMPFUN = "sell@pumpfun"
    BUY_MOONSHOT = "buy@moonshot"
    SELL_MOONSHOT = "sell@moonshot"
    BUY_PUMPSWAP = "buy@pumpswap"
    SELL_PUMPSWAP = "sell@pumpswap"
    BUY_RAYDIUM = "buy@raydium"
    SELL_RAYDIUM = "sell@raydium"
    BUY_JUPITER = "buy@jupiter"
    SELL_JUPITER = "sell@jupiter"
    BUY_LAUNCHPAD = "buy@launchpad"
    SELL_LAUNCHPAD = "sell@launchpad"
    BUY_BOOPFUN = "buy@boopfun"
    SELL_BOOPFUN = "sell@boopfun"

    FAN_OUT = "fan_out"
    CUSTOM_BUY = "custom_buy"
    TRANSFER = "transfer"
    BURN = "burn"
    DISTRIBUTE = "distribute"
    CONSOLIDATE = "consolidate"

    DEPLOY_PUMP = "deploy@pump"
    DEPLOY_BONK = "deploy@bonk"
    DEPLOY_BOOP = "deploy@boop"

    @classmethod
    def parse(cls, value: str) -> "OperationKind":
        """Look a kind up by its tag.

        Raises:
            ConfigurationError: If the tag is unknown
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown operation kind: {value}")

    @classmethod
    def for_trade(cls, protocol, direction) -> "OperationKind":
        """Kind for a buy/sell on a protocol.

        Raises:
            ConfigurationError: If the protocol or direction is unknown
        """
        try:
            protocol = Protocol(protocol)
            direction = Direction(direction)
        except ValueError:
            raise ConfigurationError(
                f"Unsupported protocol/direction: {protocol}/{direction}",
                details={"protocol": str(protocol), "direction": str(direction)}
            )
        return cls(f"{direction.value}@{protocol.value}")

    @classmethod
    def for_deploy(cls, platform) -> "OperationKind":
        try:
            platform = LaunchPlatform(platform)
        except ValueError:
            raise ConfigurationError(f"Unsupported launch platform: {platform}")
        return cls(f"deploy@{platform.value}")


@dataclass(frozen=True)
class BuyerConfig:
    """A buyer wallet in a fan-out and the share of received funds it redeploys."""

    wallet: WalletHandle
    buy_percentage: float


@dataclass(frozen=True)
class SellerConfig:
    """A seller releasing ``sell_percentage`` of its holding to its buyers."""

    wallet: WalletHandle
    sell_percentage: float
    buyers: Tuple[BuyerConfig, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "buyers", tuple(self.buyers))


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of an adapter ``validate`` call."""

    valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(valid=False, error=error)


@dataclass(frozen=True)
class OperationResult:
    """Terminal outcome of one unit of work."""

    success: bool
    error: Optional[str] = None
    references: Tuple[str, ...] = ()  # bundle ids or signatures
    warnings: Tuple[str, ...] = ()

    @classmethod
    def succeeded(cls, references=(), warnings=()) -> "OperationResult":
        return cls(success=True, references=tuple(references), warnings=tuple(warnings))

    @classmethod
    def failed(cls, error: str) -> "OperationResult":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class UnitOutcome:
    """Result of one unit, labelled for display."""

    label: str
    result: OperationResult
    stage: str  # "preflight", "execute" or "exception"


@dataclass
class BatchReport:
    """Aggregate of unit outcomes.

    Counts only ever grow; ``record`` is the single way to add an outcome.
    """

    success_count: int = 0
    fail_count: int = 0
    outcomes: List[UnitOutcome] = field(default_factory=list)

    def record(self, label: str, result: OperationResult, stage: str = "execute") -> None:
        self.outcomes.append(UnitOutcome(label=label, result=result, stage=stage))
        if result.success:
            self.success_count += 1
        else:
            self.fail_count += 1

    @property
    def total(self) -> int:
        return self.success_count + self.fail_count

    @property
    def errors(self) -> List[Tuple[str, str]]:
        """Last error string per failed unit, in unit order."""
        return [
            (outcome.label, outcome.result.error or "Unknown error")
            for outcome in self.outcomes
            if not outcome.result.success
        ]

    @property
    def all_succeeded(self) -> bool:
        return self.total > 0 and self.fail_count == 0

    def summary(self) -> str:
        """Human readable one-line summary."""
        if self.total == 0:
            return "No operations were run"
        if self.fail_count == 0:
            return f"All {self.success_count} operations completed successfully"
        if self.success_count == 0:
            return f"All {self.fail_count} operations failed"
        return f"{self.success_count} operations succeeded, {self.fail_count} failed"

    def to_dict(self) -> dict:
        return {
            "success_count": self.success_count,
            "fail_count": self.fail_count,
            "all_succeeded": self.all_succeeded,
            "summary": self.summary(),
            "errors": [{"unit": label, "error": error} for label, error in self.errors],
        }
