"""Wire models for collaborator responses.

This module defines Pydantic models for the JSON bodies returned by the
trading server, the bundle relay and the Solana RPC node.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def error_text(value: Any) -> Optional[str]:
    """Pull a readable message out of a string or ``{"message": ...}`` error."""
    if isinstance(value, dict):
        value = value.get("message") or value.get("error")
    if value is None or value == "":
        return None
    return str(value)


class JsonRpcErrorBody(BaseModel):
    """JSON-RPC error object."""

    code: int = Field(0, description="Error code")
    message: str = Field("Unknown error", description="Error message")
    data: Optional[Any] = Field(None, description="Additional error data")


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response envelope."""

    jsonrpc: str = Field("2.0", description="Protocol version")
    id: Optional[Any] = Field(None, description="Request id")
    result: Optional[Any] = Field(None, description="Call result")
    error: Optional[JsonRpcErrorBody] = Field(None, description="Error if the call failed")


class BuilderResponse(BaseModel):
    """Envelope returned by the trading server.

    Unknown keys are kept so bundle normalization can inspect them.
    """

    model_config = ConfigDict(extra="allow")

    success: Optional[bool] = Field(None, description="Whether the request succeeded")
    error: Optional[Any] = Field(None, description="Error string or object on failure")
    message: Optional[Any] = Field(None, description="Informational message")
    data: Optional[Any] = Field(None, description="Payload")

    @property
    def failure_message(self) -> Optional[str]:
        return error_text(self.error) or error_text(self.message)


class RelayAck(BaseModel):
    """Acknowledgement of a bundle submission."""

    accepted: bool = Field(True, description="Whether the relay accepted the bundle")
    bundle_id: Optional[str] = Field(None, description="Bundle id assigned by the relay")
    signatures: List[str] = Field(default_factory=list, description="Transaction signatures")

    @property
    def references(self) -> List[str]:
        if self.bundle_id:
            return [self.bundle_id]
        return list(self.signatures)


class GeneratedMint(BaseModel):
    """Mint address reserved by the trading server."""

    model_config = ConfigDict(populate_by_name=True)

    mint_address: str = Field(..., alias="pubkey", description="Mint public key")
