"""Wallet models."""

from dataclasses import dataclass, field, replace
from typing import Iterable, List

import base58
from solders.keypair import Keypair

from solana_multiwallet.utils.errors import ValidationError
from solana_multiwallet.utils.validation import short_address, validate_private_key


@dataclass(frozen=True)
class WalletHandle:
    """An address/signing-key pair participating in operations.

    The signing key never shows up in ``repr`` and takes no part in
    equality or hashing.
    """

    address: str
    signing_key: Keypair = field(repr=False, compare=False)
    is_active: bool = True

    def __post_init__(self):
        if str(self.signing_key.pubkey()) != self.address:
            raise ValidationError(
                "Signing key does not match wallet address",
                details={"address": self.address}
            )

    @classmethod
    def from_keypair(cls, keypair: Keypair, is_active: bool = True) -> "WalletHandle":
        return cls(address=str(keypair.pubkey()), signing_key=keypair, is_active=is_active)

    @classmethod
    def from_private_key(cls, private_key: str, is_active: bool = True) -> "WalletHandle":
        """Import a wallet from a base58 encoded secret key.

        Raises:
            ValidationError: If the key is malformed
        """
        private_key = private_key.strip()
        if not validate_private_key(private_key):
            raise ValidationError("Invalid private key format")
        try:
            raw = base58.b58decode(private_key)
        except ValueError as e:
            raise ValidationError(f"Invalid private key: {e}")
        if len(raw) != 64:
            raise ValidationError("Invalid private key length")
        try:
            keypair = Keypair.from_bytes(raw)
        except ValueError as e:
            raise ValidationError(f"Invalid private key: {e}")
        return cls.from_keypair(keypair, is_active=is_active)

    @classmethod
    def generate(cls, is_active: bool = True) -> "WalletHandle":
        """Create a fresh random wallet."""
        return cls.from_keypair(Keypair(), is_active=is_active)

    def with_active(self, is_active: bool) -> "WalletHandle":
        """Return a copy with a different active flag."""
        return replace(self, is_active=is_active)

    @property
    def short_address(self) -> str:
        return short_address(self.address)


def load_wallets(lines: Iterable[str]) -> List[WalletHandle]:
    """Parse wallets from text lines, one base58 secret key per line.

    Blank lines and lines starting with ``#`` are ignored. A leading ``!``
    imports the wallet as inactive. Duplicate addresses are skipped.

    Raises:
        ValidationError: With the offending line number
    """
    wallets: List[WalletHandle] = []
    seen = set()
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        is_active = not line.startswith("!")
        try:
            wallet = WalletHandle.from_private_key(line.lstrip("!"), is_active=is_active)
        except ValidationError as e:
            raise ValidationError(f"Line {number}: {e.message}", details={"line": number})
        if wallet.address in seen:
            continue
        seen.add(wallet.address)
        wallets.append(wallet)
    return wallets
