"""Base HTTP client.

This module provides the retrying JSON-over-HTTP transport shared by the
trading server, relay and RPC clients.
"""

# Standard library imports
import asyncio
import json
from typing import Any, Dict, Optional

# Third-party library imports
import httpx
from pydantic import ValidationError

# Internal imports
from solana_multiwallet.constants import (
    INITIAL_RETRY_DELAY,
    MAX_RETRY_DELAY,
    RETRIABLE_STATUS_CODES,
)
from solana_multiwallet.logging_config import get_logger
from solana_multiwallet.models.responses import JsonRpcResponse, error_text
from solana_multiwallet.utils.errors import ExternalServiceError

# Get logger
logger = get_logger(__name__)

_RETRIABLE_TRANSPORT_ERRORS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.NetworkError,
)


def backoff_delay(retry_count: int) -> float:
    """Exponential backoff capped at MAX_RETRY_DELAY."""
    return min(INITIAL_RETRY_DELAY * (2 ** retry_count), MAX_RETRY_DELAY)


class BaseHttpClient:
    """Base client owning a lazily created ``httpx.AsyncClient``."""

    service_name = "http"

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        max_retries: int = 3,
        headers: Optional[Dict[str, str]] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the client.

        Args:
            base_url: Prefix for relative request paths
            timeout: Request timeout in seconds
            max_retries: Retries for retriable failures
            headers: Extra headers sent with every request
            http_client: Pre-built httpx client, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.headers = {"Content-Type": "application/json"}
        if headers:
            self.headers.update(headers)
        self._http_client = http_client

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
            )
        return self._http_client

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Any] = None,
        retry: bool = True
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to ``base_url`` or an absolute URL
            payload: JSON body
            retry: Whether retriable failures are retried. Submissions
                pass False so a bundle is never sent twice.

        Returns:
            Decoded JSON body

        Raises:
            ExternalServiceError: On HTTP errors, transport errors or a
                body that is not JSON
        """
        url = self._url(path)
        client = self._get_client()
        max_retries = self.max_retries if retry else 0

        for retry_count in range(max_retries + 1):
            if retry_count > 0:
                logger.info(f"Retry attempt {retry_count}/{max_retries} for {method} {url}")
            try:
                response = await client.request(
                    method,
                    url,
                    headers=self.headers,
                    json=payload
                )
            except asyncio.CancelledError:
                raise
            except _RETRIABLE_TRANSPORT_ERRORS as e:
                if retry_count < max_retries:
                    wait_time = backoff_delay(retry_count)
                    logger.warning(f"Request failed, retrying in {wait_time}s: {str(e)}")
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(f"Request to {url} failed after {retry_count + 1} attempts: {str(e)}")
                raise self._error(f"{self.service_name} unreachable: {str(e) or type(e).__name__}") from e
            except httpx.HTTPError as e:
                raise self._error(f"{self.service_name} request failed: {str(e) or type(e).__name__}") from e

            if response.status_code in RETRIABLE_STATUS_CODES and retry_count < max_retries:
                wait_time = backoff_delay(retry_count)
                logger.warning(f"HTTP status {response.status_code}, retrying in {wait_time}s: {url}")
                await asyncio.sleep(wait_time)
                continue

            return self._decode(response)

        # Unreachable: the last iteration either returns or raises
        raise self._error(f"{self.service_name} retries exhausted")

    def _error(self, message: str, details: Optional[Dict[str, Any]] = None) -> ExternalServiceError:
        """Build the error type this client raises."""
        return ExternalServiceError(message, self.service_name, details=details)

    def _decode(self, response: httpx.Response) -> Any:
        """Decode a response body, turning HTTP errors into ExternalServiceError."""
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError):
            body = None

        if response.is_error:
            message = None
            if isinstance(body, dict):
                message = error_text(body.get("error")) or error_text(body.get("message"))
            raise self._error(
                message or f"HTTP {response.status_code} from {self.service_name}",
                details={"status_code": response.status_code}
            )

        if body is None:
            raise self._error(
                f"Invalid JSON from {self.service_name}",
                details={"status_code": response.status_code}
            )
        return body

    def _rpc_envelope(self, body: Any) -> JsonRpcResponse:
        """Validate a JSON-RPC body, raising this client's error when it is malformed."""
        try:
            return JsonRpcResponse.model_validate(body)
        except ValidationError as e:
            raise self._error(
                f"Malformed JSON-RPC response from {self.service_name}",
                details={"invalid_fields": e.error_count()}
            )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the client and release resources."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
