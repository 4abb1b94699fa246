"""Common test fixtures and helpers.

Shared fixtures: real keypairs, unsigned transactions that require chosen
signers, and an adapter context wired to mocks.
"""

from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import base58
import pytest
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from solana_multiwallet.config import ExecutorConfig
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.responses import RelayAck
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.base import AdapterContext

TOKEN_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def build_unsigned_transaction(*signers: Pubkey, program_id: Optional[Pubkey] = None) -> VersionedTransaction:
    """A v0 transaction whose required signers are exactly ``signers``, payer first."""
    program_id = program_id or Pubkey.new_unique()
    accounts = [AccountMeta(signer, True, True) for signer in signers]
    instruction = Instruction(program_id, bytes([1, 2, 3]), accounts)
    message = MessageV0.try_compile(signers[0], [instruction], [], Hash.default())
    return VersionedTransaction.populate(message, [Signature.default()] * len(signers))


def encode_transaction(tx: VersionedTransaction) -> str:
    return base58.b58encode(bytes(tx)).decode("ascii")


def unsigned_payload(*wallets: WalletHandle) -> str:
    """Base58 payload requiring a signature from each wallet."""
    signers = [Pubkey.from_string(wallet.address) for wallet in wallets]
    return encode_transaction(build_unsigned_transaction(*signers))


@pytest.fixture
def wallet_factory():
    """Create wallets on demand."""
    def _make(is_active: bool = True) -> WalletHandle:
        return WalletHandle.generate(is_active=is_active)
    return _make


@pytest.fixture
def wallets(wallet_factory):
    return [wallet_factory() for _ in range(3)]


@pytest.fixture
def rich_snapshot(wallets):
    """Every test wallet holds plenty of SOL and tokens."""
    return BalanceSnapshot(
        sol={wallet.address: 10.0 for wallet in wallets},
        token={wallet.address: 1_000.0 for wallet in wallets},
        token_address=TOKEN_MINT,
    )


@pytest.fixture
def trading_client():
    client = MagicMock()
    client.build_bundles = AsyncMock()
    client.generate_mint = AsyncMock()
    client.send_transactions = AsyncMock(return_value={"success": True})
    return client


@pytest.fixture
def jito_relay():
    relay = MagicMock()
    relay.submit = AsyncMock(return_value=RelayAck(bundle_id="bundle-1"))
    return relay


@pytest.fixture
def rpc_relay():
    relay = MagicMock()
    relay.submit = AsyncMock(return_value=RelayAck(signatures=["sig-1"]))
    return relay


@pytest.fixture
def adapter_context(trading_client, jito_relay, rpc_relay):
    return AdapterContext(
        trading_client=trading_client,
        jito_relay=jito_relay,
        rpc_relay=rpc_relay,
        settings=ExecutorConfig(inter_unit_delay=0),
    )
