"""
Protocol adapter base class.

An adapter is the validate/execute pair for one backend. ``validate``
checks a unit against a balance snapshot without side effects;
``execute`` builds bundles on the trading server, signs them locally and
hands them to a relay. Ordinary failures come back as OperationResult
failures; only programmer errors raise.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from solana_multiwallet.clients.relay_client import BundleRelay
from solana_multiwallet.clients.trading_client import TradingServerClient
from solana_multiwallet.config import ExecutorConfig
from solana_multiwallet.logging_config import get_logger
from solana_multiwallet.models.balances import BalanceSnapshot
from solana_multiwallet.models.bundles import SignedBundle, UnsignedBundle
from solana_multiwallet.models.operations import OperationKind, OperationResult, ValidationResult
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.signing import describe_failures, sign_and_prepare
from solana_multiwallet.utils.errors import ExecutionError, OrchestratorError

logger = get_logger(__name__)

NO_WALLETS = "Please activate at least one wallet"


@dataclass
class AdapterContext:
    """Collaborators shared by all adapters."""

    trading_client: TradingServerClient
    jito_relay: BundleRelay
    rpc_relay: BundleRelay
    settings: ExecutorConfig


class ProtocolAdapter(ABC):
    """Validate/execute capability pair for one operation kind."""

    kind: OperationKind
    endpoint: str = ""
    accept_presigned = False

    def __init__(self, context: AdapterContext):
        self.context = context
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    # Validation

    async def validate(
        self,
        wallets: Sequence[WalletHandle],
        params: Any,
        balances: BalanceSnapshot
    ) -> ValidationResult:
        """Check a unit before any execution starts.

        Returns:
            ValidationResult with the first problem found
        """
        if not wallets:
            return ValidationResult.fail(NO_WALLETS)
        error = self.check(wallets, params, balances)
        if error:
            return ValidationResult.fail(error)
        return ValidationResult.ok()

    @abstractmethod
    def check(
        self,
        wallets: Sequence[WalletHandle],
        params: Any,
        balances: BalanceSnapshot
    ) -> Optional[str]:
        """Return an error message, or None when the unit is valid."""

    # Execution

    @abstractmethod
    def build_payload(self, wallets: Sequence[WalletHandle], params: Any) -> Dict[str, Any]:
        """Request body for the builder."""

    def endpoint_for(self, params: Any) -> str:
        return self.endpoint

    def relay_for(self, params: Any) -> BundleRelay:
        return self.context.jito_relay

    async def build(self, wallets: Sequence[WalletHandle], params: Any) -> List[UnsignedBundle]:
        return await self.context.trading_client.build_bundles(
            self.endpoint_for(params),
            self.build_payload(wallets, params)
        )

    async def execute(self, wallets: Sequence[WalletHandle], params: Any) -> OperationResult:
        """Build, sign and submit.

        Returns:
            Terminal OperationResult
        """
        try:
            bundles = await self.build(wallets, params)
            return await self.sign_and_submit(bundles, wallets, params)
        except asyncio.CancelledError:
            raise
        except OrchestratorError as e:
            self.logger.warning(f"{self.kind.value} failed: {e.message}")
            return OperationResult.failed(e.message)

    async def sign_and_submit(
        self,
        bundles: Sequence[UnsignedBundle],
        wallets: Sequence[WalletHandle],
        params: Any
    ) -> OperationResult:
        """Sign every bundle first, then submit them in order.

        A bundle left empty after dropping unsignable payloads fails the
        unit before anything is submitted.
        """
        signed: List[SignedBundle] = []
        warnings: List[str] = []
        for position, bundle in enumerate(bundles, start=1):
            result = sign_and_prepare(bundle, wallets, accept_presigned=self.accept_presigned)
            if result.bundle.is_empty:
                return OperationResult.failed(
                    f"Bundle {position}/{len(bundles)} has no signable transactions "
                    f"({describe_failures(result.failures)})"
                )
            if result.failures:
                warnings.append(
                    f"Bundle {position}: dropped {len(result.failures)} payload(s) "
                    f"({describe_failures(result.failures)})"
                )
            signed.append(result.bundle)

        relay = self.relay_for(params)
        references: List[str] = []
        for position, bundle in enumerate(signed, start=1):
            try:
                ack = await relay.submit(bundle)
                if not ack.accepted:
                    raise ExecutionError(
                        f"Bundle {position}/{len(signed)} was not accepted by {relay.name}",
                        details={"relay": relay.name}
                    )
            except OrchestratorError as e:
                sent = f"; {position - 1} of {len(signed)} bundle(s) already submitted" if position > 1 else ""
                return OperationResult.failed(f"{e.message}{sent}")
            references.extend(ack.references)

        return OperationResult.succeeded(references=references, warnings=warnings)
