"""Bundle relays.

A relay takes a SignedBundle and reports whether it was accepted. Relays
never retry a submission; idempotency is the relay service's concern.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from solana_multiwallet.clients.base_client import BaseHttpClient
from solana_multiwallet.clients.rpc_client import SolanaRpcClient
from solana_multiwallet.clients.trading_client import TradingServerClient
from solana_multiwallet.config import RelayConfig, get_relay_config
from solana_multiwallet.logging_config import get_logger
from solana_multiwallet.models.bundles import SignedBundle
from solana_multiwallet.models.responses import RelayAck
from solana_multiwallet.utils.errors import ExternalServiceError, RelayError

logger = get_logger(__name__)


class BundleRelay(ABC):
    """Submission boundary for signed bundles."""

    name = "relay"

    @abstractmethod
    async def submit(self, bundle: SignedBundle) -> RelayAck:
        """Submit a bundle.

        Raises:
            ExternalServiceError: If the relay rejects or cannot be reached
        """

    async def close(self) -> None:
        return None


class JitoBundleRelay(BaseHttpClient, BundleRelay):
    """MEV-protected bundle relay speaking JSON-RPC ``sendBundle``."""

    name = "jito"
    service_name = "jito"

    def __init__(
        self,
        config: Optional[RelayConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config or get_relay_config()
        super().__init__(
            base_url=self.config.jito_url,
            timeout=self.config.timeout,
            max_retries=0,
            http_client=http_client
        )

    def _error(self, message: str, details: Optional[Dict[str, Any]] = None) -> ExternalServiceError:
        return RelayError(message, relay=self.name, details=details)

    async def submit(self, bundle: SignedBundle) -> RelayAck:
        if bundle.is_empty:
            raise RelayError("Refusing to submit an empty bundle", relay=self.name)
        params: list = [list(bundle.transactions)]
        if bundle.encoding != "base58":
            params.append({"encoding": bundle.encoding})
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "sendBundle",
            "params": params
        }
        body = await self._request("POST", self.config.jito_url, payload, retry=False)
        response = self._rpc_envelope(body)
        if response.error is not None:
            raise RelayError(f"Jito rejected bundle: {response.error.message}", relay=self.name)
        logger.info(f"Bundle of {len(bundle)} transaction(s) accepted by Jito: {response.result}")
        return RelayAck(
            accepted=response.result is not None,
            bundle_id=str(response.result) if response.result else None
        )


class TradingServerRelay(BundleRelay):
    """Submits through the trading server's send endpoint."""

    name = "trading-server"

    def __init__(self, client: TradingServerClient, use_rpc: bool = False):
        self.client = client
        self.use_rpc = use_rpc

    async def submit(self, bundle: SignedBundle, use_rpc: Optional[bool] = None) -> RelayAck:
        if bundle.is_empty:
            raise RelayError("Refusing to submit an empty bundle", relay=self.name)
        body = await self.client.send_transactions(
            bundle.transactions,
            use_rpc=self.use_rpc if use_rpc is None else use_rpc
        )
        data = body.get("data") if isinstance(body, dict) else None
        bundle_id = None
        signatures = []
        if isinstance(data, dict):
            bundle_id = data.get("bundleId") or data.get("bundle_id")
            signatures = [str(s) for s in data.get("signatures", [])]
        return RelayAck(bundle_id=bundle_id, signatures=signatures)


class RpcRelay(BundleRelay):
    """Submits each payload with ``sendTransaction``, in bundle order.

    Transactions sent before a failing one stay sent; the error names how
    many made it.
    """

    name = "rpc"

    def __init__(self, client: SolanaRpcClient):
        self.client = client

    async def submit(self, bundle: SignedBundle) -> RelayAck:
        if bundle.is_empty:
            raise RelayError("Refusing to submit an empty bundle", relay=self.name)
        signatures = []
        for index, encoded in enumerate(bundle.transactions):
            try:
                signatures.append(await self.client.send_transaction(encoded, bundle.encoding))
            except ExternalServiceError as e:
                raise RelayError(
                    f"Transaction {index + 1}/{len(bundle)} failed after {len(signatures)} sent: {e.message}",
                    relay=self.name,
                    details={"sent": signatures}
                ) from e
        return RelayAck(signatures=signatures)
