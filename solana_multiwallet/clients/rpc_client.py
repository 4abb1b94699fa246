"""Solana JSON-RPC client.

Only the calls the orchestrator needs: native and token balances for the
balance snapshot and ``sendTransaction`` for RPC submission.
"""

from typing import Any, Dict, List, Optional

import httpx

from solana_multiwallet.clients.base_client import BaseHttpClient
from solana_multiwallet.config import SolanaConfig, get_solana_config
from solana_multiwallet.logging_config import get_logger
from solana_multiwallet.utils.errors import ExternalServiceError, RpcError

logger = get_logger(__name__)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


class SolanaRpcClient(BaseHttpClient):
    """Client for a Solana RPC node."""

    service_name = "solana-rpc"

    def __init__(
        self,
        config: Optional[SolanaConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config or get_solana_config()
        super().__init__(
            base_url=self.config.rpc_url,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
            http_client=http_client
        )
        self._request_id = 0

    def _error(self, message: str, details: Optional[Dict[str, Any]] = None) -> ExternalServiceError:
        return RpcError(message, details=details)

    async def _call(self, method: str, params: List[Any], retry: bool = True) -> Any:
        """Make a JSON-RPC request.

        Raises:
            RpcError: If the node returns an error or cannot be reached
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params
        }
        body = await self._request("POST", self.config.rpc_url, payload, retry=retry)
        response = self._rpc_envelope(body)
        if response.error is not None:
            raise RpcError(
                f"Solana RPC error: {response.error.message}",
                details={"method": method, "code": response.error.code}
            )
        return response.result

    async def get_balance(self, address: str) -> int:
        """Get the native balance of an account in lamports."""
        result = await self._call("getBalance", [address, {"commitment": self.config.commitment}])
        if isinstance(result, dict):
            return int(result.get("value", 0))
        return int(result or 0)

    async def get_token_balance(self, owner: str, mint: str) -> float:
        """Sum the UI amount of ``mint`` across the owner's token accounts."""
        result = await self._call(
            "getTokenAccountsByOwner",
            [
                owner,
                {"mint": mint},
                {"encoding": "jsonParsed", "commitment": self.config.commitment}
            ]
        )
        total = 0.0
        for account in (result or {}).get("value", []):
            info = (
                account.get("account", {})
                .get("data", {})
                .get("parsed", {})
                .get("info", {})
            )
            amount = info.get("tokenAmount", {}).get("uiAmount")
            if amount:
                total += float(amount)
        return total

    async def send_transaction(self, encoded: str, encoding: str = "base58") -> str:
        """Submit one signed transaction. Never retried.

        Returns:
            Transaction signature
        """
        return await self._call(
            "sendTransaction",
            [
                encoded,
                {
                    "encoding": encoding,
                    "skipPreflight": False,
                    "preflightCommitment": self.config.commitment
                }
            ],
            retry=False
        )
