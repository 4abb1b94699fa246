"""Balance snapshot model."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class BalanceSnapshot:
    """Best-effort balances keyed by wallet address.

    ``sol`` is in SOL; ``token`` holds UI amounts of ``token_address``.
    Missing addresses read as zero.
    """

    sol: Mapping[str, float] = field(default_factory=dict)
    token: Mapping[str, float] = field(default_factory=dict)
    token_address: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "sol", MappingProxyType(dict(self.sol)))
        object.__setattr__(self, "token", MappingProxyType(dict(self.token)))

    def sol_of(self, address: str) -> float:
        return self.sol.get(address, 0.0)

    def token_of(self, address: str) -> float:
        return self.token.get(address, 0.0)


EMPTY_SNAPSHOT = BalanceSnapshot()
