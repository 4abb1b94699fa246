"""Trading server client.

The trading server is the remote bundle builder: it turns wallet addresses
and operation parameters into unsigned, base58 encoded transactions. It
can also forward signed transactions for submission.
"""

from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from solana_multiwallet.clients.base_client import BaseHttpClient
from solana_multiwallet.config import TradingServerConfig, get_trading_server_config
from solana_multiwallet.constants import GENERATE_MINT_ENDPOINT, SEND_TRANSACTIONS_ENDPOINT
from solana_multiwallet.logging_config import get_logger
from solana_multiwallet.models.bundles import UnsignedBundle
from solana_multiwallet.models.responses import BuilderResponse, GeneratedMint, error_text
from solana_multiwallet.utils.errors import BuilderError, ExternalServiceError

logger = get_logger(__name__)

NO_TRANSACTIONS = "No transactions returned from backend"


def _as_bundle(item: Any) -> Optional[UnsignedBundle]:
    """Coerce one bundle-shaped item, or return None if it is not one."""
    if isinstance(item, str):
        return UnsignedBundle(transactions=(item,))
    if isinstance(item, list) and all(isinstance(tx, str) for tx in item):
        return UnsignedBundle(transactions=tuple(item))
    if isinstance(item, dict):
        transactions = item.get("transactions")
        if isinstance(transactions, list) and all(isinstance(tx, str) for tx in transactions):
            return UnsignedBundle(transactions=tuple(transactions))
    return None


def _extract(payload: Any) -> List[UnsignedBundle]:
    if isinstance(payload, list):
        if all(isinstance(item, str) for item in payload):
            return [UnsignedBundle(transactions=tuple(payload))]
        bundles = [_as_bundle(item) for item in payload]
        if any(bundle is None for bundle in bundles):
            raise BuilderError("Invalid bundle format from backend")
        return bundles

    if not isinstance(payload, dict):
        return []

    if isinstance(payload.get("bundles"), list):
        return _extract_bundles(payload["bundles"])
    if isinstance(payload.get("transactions"), list):
        return _extract(payload["transactions"]) if payload["transactions"] else []
    if isinstance(payload.get("transaction"), str):
        return [UnsignedBundle(transactions=(payload["transaction"],))]
    return []


def _extract_bundles(items: List[Any]) -> List[UnsignedBundle]:
    bundles = []
    for item in items:
        bundle = _as_bundle(item)
        if bundle is None:
            raise BuilderError("Invalid bundle format from backend")
        bundles.append(bundle)
    return bundles


def normalize_bundles(body: Any) -> List[UnsignedBundle]:
    """Normalize a builder response into unsigned bundles.

    Accepted shapes, optionally wrapped in a ``data`` envelope:
    ``bundles`` as a list of lists or of ``{"transactions": [...]}``,
    a flat ``transactions`` list, a single ``transaction`` string, or a
    raw list of payloads or bundles.

    Raises:
        BuilderError: If the builder reported a failure or nothing usable
            came back
    """
    if isinstance(body, dict):
        try:
            envelope = BuilderResponse.model_validate(body)
        except ValidationError as e:
            raise BuilderError(f"Malformed builder response: {e.error_count()} invalid field(s)")
        if envelope.success is False:
            raise BuilderError(envelope.failure_message or "Builder request failed")
        bundles = _extract(body)
        if not bundles and envelope.data is not None:
            bundles = _extract(envelope.data)
    else:
        bundles = _extract(body)

    bundles = [bundle for bundle in bundles if len(bundle) > 0]
    if not bundles:
        raise BuilderError(NO_TRANSACTIONS)
    return bundles


class TradingServerClient(BaseHttpClient):
    """Client for the remote bundle builder."""

    service_name = "trading-server"

    def __init__(
        self,
        config: Optional[TradingServerConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the trading server client.

        Args:
            config: Trading server configuration. Defaults to environment-based config.
            http_client: Pre-built httpx client
        """
        self.config = config or get_trading_server_config()
        headers = {"X-API-Key": self.config.api_key} if self.config.api_key else None
        super().__init__(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
            headers=headers,
            http_client=http_client
        )

    def _error(self, message: str, details: Optional[Dict[str, Any]] = None) -> ExternalServiceError:
        return BuilderError(message, details=details)

    async def build_bundles(self, path: str, payload: Dict[str, Any]) -> List[UnsignedBundle]:
        """Ask the builder for unsigned bundles.

        Args:
            path: Builder route, e.g. ``/api/tokens/buy``
            payload: Operation specific request body

        Returns:
            Non-empty list of unsigned bundles

        Raises:
            BuilderError: On transport errors, HTTP errors or unusable bodies
        """
        logger.debug(f"Requesting bundles from {path}")
        body = await self._request("POST", path, payload)
        bundles = normalize_bundles(body)
        logger.info(
            f"Builder returned {len(bundles)} bundle(s) with "
            f"{sum(len(b) for b in bundles)} transaction(s) from {path}"
        )
        return bundles

    async def generate_mint(self) -> str:
        """Reserve a fresh mint address for token creation."""
        body = await self._request("GET", GENERATE_MINT_ENDPOINT)
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        try:
            return GeneratedMint.model_validate(body).mint_address
        except ValidationError:
            raise BuilderError("Mint generation returned no pubkey")

    async def send_transactions(self, transactions: Sequence[str], use_rpc: bool = False) -> Any:
        """Forward signed transactions for submission. Never retried."""
        body = await self._request(
            "POST",
            SEND_TRANSACTIONS_ENDPOINT,
            {"transactions": list(transactions), "useRpc": use_rpc},
            retry=False
        )
        if isinstance(body, dict) and body.get("success") is False:
            raise BuilderError(error_text(body.get("error")) or "Transaction submission failed")
        return body
