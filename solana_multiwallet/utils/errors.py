"""
Error handling utilities for the multi-wallet orchestrator.

This module defines the exception taxonomy used across the package.
Configuration errors abort a batch before it starts; validation, signing
and execution errors are local to a single unit of work and end up as
failed results in the batch report.
"""

from enum import Enum
from typing import Any, Dict, Optional, Sequence

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes for the orchestrator."""

    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Signing errors
    SIGNING_ERROR = "SIGNING_ERROR"
    UNRESOLVED_SIGNER = "UNRESOLVED_SIGNER"
    INVALID_TRANSACTION = "INVALID_TRANSACTION"

    # Execution errors
    EXECUTION_ERROR = "EXECUTION_ERROR"
    BATCH_IN_PROGRESS = "BATCH_IN_PROGRESS"

    # Collaborator errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    BUILDER_ERROR = "BUILDER_ERROR"
    RELAY_ERROR = "RELAY_ERROR"
    RPC_ERROR = "RPC_ERROR"


class ErrorResponse(BaseModel):
    """Standard error response model."""

    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class OrchestratorError(Exception):
    """Base exception for all orchestrator errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new orchestrator error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details
        }

    def to_response(self) -> ErrorResponse:
        """Convert the error to an ErrorResponse model."""
        return ErrorResponse(**self.to_dict())


class ConfigurationError(OrchestratorError):
    """Unknown operation kind, missing adapter or bad settings."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            details=details
        )


class ValidationError(OrchestratorError):
    """Exception for validation errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=details
        )


class SigningError(OrchestratorError):
    """A payload could not be signed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SIGNING_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code=code, details=details)


class UnresolvedSignerError(SigningError):
    """A required signer has no matching wallet."""

    def __init__(self, unresolved: Sequence[str], payload_index: Optional[int] = None):
        self.unresolved = tuple(unresolved)
        self.payload_index = payload_index
        super().__init__(
            message=f"No signing key for required signer(s): {', '.join(self.unresolved)}",
            code=ErrorCode.UNRESOLVED_SIGNER,
            details={"unresolved": list(self.unresolved), "payload_index": payload_index}
        )


class ExecutionError(OrchestratorError):
    """The backend rejected an operation."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code=ErrorCode.EXECUTION_ERROR,
            details=details
        )


class BatchInProgressError(OrchestratorError):
    """A batch of the same group is still running."""

    def __init__(self, group: Any):
        super().__init__(
            message=f"Batch already running for group {group!r}",
            code=ErrorCode.BATCH_IN_PROGRESS,
            details={"group": repr(group)}
        )


class ExternalServiceError(OrchestratorError):
    """Exception for errors from external services."""

    def __init__(
        self,
        message: str,
        service_name: str,
        code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new external service error.

        Args:
            message: Error message
            service_name: Name of the external service
            code: Error code
            details: Additional error details
        """
        error_details = {"service": service_name}
        if details:
            error_details.update(details)
        self.service_name = service_name
        super().__init__(message=message, code=code, details=error_details)


class BuilderError(ExternalServiceError):
    """The remote bundle builder failed or returned nothing usable."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "trading-server", ErrorCode.BUILDER_ERROR, details)


class RelayError(ExternalServiceError):
    """A bundle relay refused or failed a submission."""

    def __init__(self, message: str, relay: str = "relay", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, relay, ErrorCode.RELAY_ERROR, details)


class RpcError(ExternalServiceError):
    """Exception for Solana RPC errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "solana-rpc", ErrorCode.RPC_ERROR, details)
