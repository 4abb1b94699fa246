"""Bundle signing pipeline.

Each payload of an unsigned bundle is decoded to find the signers its
message requires. Every required signer must be matched by a held wallet
before the payload is signed; a payload with any unresolved signer is
dropped and reported, never passed on partially signed. Nothing here
touches the network.
"""

import base64
from typing import Dict, List, Sequence, Tuple

import base58
from solders.message import to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from solana_multiwallet.logging_config import get_logger
from solana_multiwallet.models.bundles import (
    PayloadFailure,
    SignedBundle,
    SigningResult,
    UnsignedBundle,
)
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.utils.errors import SigningError, UnresolvedSignerError

logger = get_logger(__name__)

SUPPORTED_ENCODINGS = ("base58", "base64")


def decode_payload(encoded: str, encoding: str = "base58") -> bytes:
    """Decode one wire payload.

    Raises:
        SigningError: If the encoding is unsupported or the text is malformed
    """
    try:
        if encoding == "base58":
            return base58.b58decode(encoded)
        if encoding == "base64":
            return base64.b64decode(encoded, validate=True)
    except ValueError as e:
        raise SigningError(f"Malformed {encoding} payload: {e}")
    raise SigningError(f"Unsupported payload encoding: {encoding}")


def encode_payload(raw: bytes, encoding: str = "base58") -> str:
    if encoding == "base64":
        return base64.b64encode(raw).decode("ascii")
    return base58.b58encode(raw).decode("ascii")


def parse_transaction(raw: bytes) -> VersionedTransaction:
    """Deserialize a legacy or v0 transaction.

    Raises:
        SigningError: If the bytes are not a transaction
    """
    try:
        return VersionedTransaction.from_bytes(raw)
    except Exception as e:  # solders raises its own error types here
        raise SigningError(f"Payload is not a valid transaction: {e}")


def required_signers(tx: VersionedTransaction) -> List[Pubkey]:
    """Public keys that must sign, in message order."""
    message = tx.message
    return list(message.account_keys[:message.header.num_required_signatures])


def sign_transaction(
    tx: VersionedTransaction,
    keys: Dict[str, WalletHandle],
    accept_presigned: bool = False
) -> VersionedTransaction:
    """Sign ``tx`` with the complete set of matching keys.

    Args:
        tx: Transaction to sign
        keys: Wallets by address
        accept_presigned: Treat a required signer whose slot already holds
            a valid signature (e.g. a builder-held mint key) as satisfied

    Raises:
        UnresolvedSignerError: Listing every required signer with no key
    """
    message = tx.message
    signers = required_signers(tx)
    message_bytes = to_bytes_versioned(message)

    existing = list(tx.signatures)
    if len(existing) != len(signers):
        existing = [Signature.default()] * len(signers)

    signatures: List[Signature] = []
    unresolved: List[str] = []
    for position, pubkey in enumerate(signers):
        wallet = keys.get(str(pubkey))
        if wallet is not None:
            signatures.append(wallet.signing_key.sign_message(message_bytes))
            continue
        current = existing[position]
        if (
            accept_presigned
            and current != Signature.default()
            and current.verify(pubkey, message_bytes)
        ):
            signatures.append(current)
            continue
        unresolved.append(str(pubkey))

    if unresolved:
        raise UnresolvedSignerError(unresolved)
    return VersionedTransaction.populate(message, signatures)


def sign_and_prepare(
    bundle: UnsignedBundle,
    keys: Sequence[WalletHandle],
    accept_presigned: bool = False
) -> SigningResult:
    """Sign every payload of ``bundle`` with the matching held keys.

    Payloads that cannot be fully signed are dropped from the result and
    listed in ``SigningResult.failures`` with the unresolved addresses.
    Surviving payloads keep their original order and encoding.

    Args:
        bundle: Unsigned bundle from the builder
        keys: Wallets whose keys may be applied
        accept_presigned: See ``sign_transaction``

    Returns:
        SigningResult; an empty ``bundle`` in it means nothing can be submitted
    """
    by_address = {wallet.address: wallet for wallet in keys}
    signed: List[str] = []
    failures: List[PayloadFailure] = []

    for index, encoded in enumerate(bundle.transactions):
        try:
            tx = parse_transaction(decode_payload(encoded, bundle.encoding))
            signed_tx = sign_transaction(tx, by_address, accept_presigned=accept_presigned)
        except UnresolvedSignerError as e:
            logger.warning(
                f"Dropping payload {index}: unresolved signer(s) {', '.join(e.unresolved)}"
            )
            failures.append(PayloadFailure(index=index, reason=e.message, unresolved=e.unresolved))
            continue
        except SigningError as e:
            logger.warning(f"Dropping payload {index}: {e.message}")
            failures.append(PayloadFailure(index=index, reason=e.message))
            continue
        signed.append(encode_payload(bytes(signed_tx), bundle.encoding))

    return SigningResult(
        bundle=SignedBundle(transactions=tuple(signed), encoding=bundle.encoding),
        failures=tuple(failures),
    )


def describe_failures(failures: Tuple[PayloadFailure, ...]) -> str:
    """One line naming each dropped payload and why."""
    return "; ".join(f"payload {f.index}: {f.reason}" for f in failures)
