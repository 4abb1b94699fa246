"""Bundle models for the signing pipeline."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class UnsignedBundle:
    """Ordered, encoded transactions produced by the remote builder."""

    transactions: Tuple[str, ...]
    encoding: str = "base58"

    def __post_init__(self):
        object.__setattr__(self, "transactions", tuple(self.transactions))

    def __len__(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True)
class SignedBundle:
    """Same shape as UnsignedBundle once every payload carries its signatures."""

    transactions: Tuple[str, ...]
    encoding: str = "base58"

    def __post_init__(self):
        object.__setattr__(self, "transactions", tuple(self.transactions))

    def __len__(self) -> int:
        return len(self.transactions)

    @property
    def is_empty(self) -> bool:
        return not self.transactions


@dataclass(frozen=True)
class PayloadFailure:
    """A payload dropped from a bundle because it could not be signed."""

    index: int
    reason: str
    unresolved: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SigningResult:
    """Signed payloads plus the payloads that had to be dropped."""

    bundle: SignedBundle
    failures: Tuple[PayloadFailure, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.failures

    @property
    def unresolved(self) -> Tuple[str, ...]:
        seen = []
        for failure in self.failures:
            for address in failure.unresolved:
                if address not in seen:
                    seen.append(address)
        return tuple(seen)
