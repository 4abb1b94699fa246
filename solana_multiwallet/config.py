"""Configuration module for the multi-wallet orchestrator."""

# Standard library imports
import ipaddress
import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Optional
from urllib.parse import urlsplit, urlunsplit

# Third-party library imports
from dotenv import load_dotenv

# Internal imports
from solana_multiwallet.constants import (
    DEFAULT_JITO_BUNDLE_URL,
    DEFAULT_RPC_URL,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_TRADING_SERVER_URL,
)
from solana_multiwallet.utils.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


def get_env_var(key: str, default: Any = None, required: bool = False,
                validator: Optional[Callable[[str], Any]] = None) -> Any:
    """Get and validate environment variable.

    Args:
        key: Environment variable name
        default: Default value if not present
        required: If True, raises ValueError when not found
        validator: Optional validation function

    Returns:
        The environment variable value or default

    Raises:
        ValueError: If required and not found, or fails validation
    """
    value = os.environ.get(key)

    if value is None:
        if required:
            raise ValueError(f"Required environment variable '{key}' not found")
        return default

    if validator:
        try:
            return validator(value)
        except ValueError as e:
            raise ValueError(f"Invalid value for environment variable '{key}': {str(e)}")

    return value


def int_validator(value: str) -> int:
    """Validate and convert string to integer.

    Raises:
        ValueError: If not a valid integer
    """
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid integer")


def float_validator(value: str) -> float:
    """Validate and convert string to a non-negative float.

    Raises:
        ValueError: If not a valid number or negative
    """
    try:
        number = float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a valid number")
    if number < 0:
        raise ValueError(f"'{value}' must not be negative")
    return number


def url_validator(value: str) -> str:
    """Validate URL format.

    Raises:
        ValueError: If not a valid URL format
    """
    url_pattern = re.compile(
        r'^(https?):\/\/'  # http:// or https://
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+(?:[A-Z]{2,6}\.?|[A-Z0-9-]{2,}\.?)|'  # domain
        r'localhost|'  # localhost
        r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'  # or IPv4
        r'(?::\d+)?'  # optional port
        r'(?:/?|[/?]\S+)$', re.IGNORECASE)

    if not url_pattern.match(value):
        raise ValueError(f"'{value}' is not a valid URL")
    return value


def commitment_validator(value: str) -> str:
    """Validate Solana commitment level."""
    valid_commitments = ("processed", "confirmed", "finalized")
    if value.lower() not in valid_commitments:
        raise ValueError(f"Commitment must be one of: {', '.join(valid_commitments)}")
    return value.lower()


def log_level_validator(value: str) -> str:
    """Validate log level."""
    valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
    upper_value = value.upper()
    if upper_value not in valid_levels:
        raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
    return upper_value


def _is_ip_address(host: str) -> bool:
    try:
        ipaddress.IPv4Address(host)
    except ValueError:
        return False
    return True


def normalize_server_url(url: str) -> str:
    """Normalize a trading server URL.

    A missing scheme is added. Local hosts (``localhost`` or an IPv4
    address) are reached over plain http, every other host over https.

    Args:
        url: URL as typed by the operator, e.g. ``localhost:8888``

    Returns:
        The normalized URL without a trailing slash

    Raises:
        ConfigurationError: If the URL cannot be parsed
    """
    candidate = (url or "").strip()
    if not candidate:
        raise ConfigurationError("Invalid URL format", details={"url": url})
    if not re.match(r"^https?://", candidate, re.IGNORECASE):
        candidate = "https://" + candidate

    try:
        parts = urlsplit(candidate)
        host = parts.hostname
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        raise ConfigurationError("Invalid URL format", details={"url": url})
    if not host:
        raise ConfigurationError("Invalid URL format", details={"url": url})

    scheme = "http" if host == "localhost" or _is_ip_address(host) else "https"
    path = parts.path.rstrip("/")
    return urlunsplit((scheme, parts.netloc, path, parts.query, ""))


@dataclass
class TradingServerConfig:
    """Configuration for the remote bundle builder."""

    base_url: str = DEFAULT_TRADING_SERVER_URL
    api_key: Optional[str] = None
    timeout: int = 30  # seconds
    max_retries: int = 3

    def __post_init__(self):
        self.base_url = normalize_server_url(self.base_url)
        if self.max_retries < 0:
            raise ConfigurationError(f"Invalid max_retries: {self.max_retries}")


@lru_cache()
def get_trading_server_config() -> TradingServerConfig:
    """Get trading server configuration from environment variables.

    Raises:
        ValueError: If environment variables fail validation
    """
    return TradingServerConfig(
        base_url=get_env_var("TRADING_SERVER_URL", DEFAULT_TRADING_SERVER_URL),
        api_key=get_env_var("TRADING_SERVER_API_KEY"),
        timeout=get_env_var("TRADING_SERVER_TIMEOUT", 30, validator=int_validator),
        max_retries=get_env_var("TRADING_SERVER_MAX_RETRIES", 3, validator=int_validator)
    )


@dataclass
class RelayConfig:
    """Configuration for the MEV-protected bundle relay."""

    jito_url: str = DEFAULT_JITO_BUNDLE_URL
    timeout: int = 30  # seconds


@lru_cache()
def get_relay_config() -> RelayConfig:
    """Get relay configuration from environment variables."""
    return RelayConfig(
        jito_url=get_env_var("JITO_BUNDLE_URL", DEFAULT_JITO_BUNDLE_URL, validator=url_validator),
        timeout=get_env_var("JITO_TIMEOUT", 30, validator=int_validator)
    )


@dataclass
class SolanaConfig:
    """Configuration for Solana RPC connection."""

    rpc_url: str = DEFAULT_RPC_URL
    commitment: str = "confirmed"
    timeout: int = 30  # seconds
    max_retries: int = 3


@lru_cache()
def get_solana_config() -> SolanaConfig:
    """Get Solana configuration from environment variables.

    Raises:
        ValueError: If environment variables fail validation
    """
    return SolanaConfig(
        rpc_url=get_env_var("SOLANA_RPC_URL", DEFAULT_RPC_URL, validator=url_validator),
        commitment=get_env_var("SOLANA_COMMITMENT", "confirmed",
                               validator=commitment_validator),
        timeout=get_env_var("SOLANA_TIMEOUT", 30, validator=int_validator),
        max_retries=get_env_var("SOLANA_MAX_RETRIES", 3, validator=int_validator)
    )


@dataclass
class ExecutorConfig:
    """Configuration for batch execution."""

    inter_unit_delay: float = 1.0  # seconds between unit network calls
    balance_concurrency: int = 10
    balance_cache_ttl: float = 5.0  # seconds
    default_slippage_bps: int = DEFAULT_SLIPPAGE_BPS

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.inter_unit_delay < 0:
            raise ConfigurationError(f"Invalid inter_unit_delay: {self.inter_unit_delay}")
        if self.balance_concurrency < 1:
            raise ConfigurationError(f"Invalid balance_concurrency: {self.balance_concurrency}")
        if not 0 <= self.default_slippage_bps <= 10_000:
            raise ConfigurationError(f"Invalid default_slippage_bps: {self.default_slippage_bps}")


@lru_cache()
def get_executor_config() -> ExecutorConfig:
    """Get executor configuration from environment variables."""
    return ExecutorConfig(
        inter_unit_delay=get_env_var("INTER_UNIT_DELAY", 1.0, validator=float_validator),
        balance_concurrency=get_env_var("BALANCE_CONCURRENCY", 10, validator=int_validator),
        balance_cache_ttl=get_env_var("BALANCE_CACHE_TTL", 5.0, validator=float_validator),
        default_slippage_bps=get_env_var("DEFAULT_SLIPPAGE_BPS", DEFAULT_SLIPPAGE_BPS,
                                         validator=int_validator)
    )


@dataclass
class AppConfig:
    """Comprehensive application configuration."""

    trading_server: TradingServerConfig = field(default_factory=get_trading_server_config)
    relay: RelayConfig = field(default_factory=get_relay_config)
    solana: SolanaConfig = field(default_factory=get_solana_config)
    executor: ExecutorConfig = field(default_factory=get_executor_config)
    log_level: str = field(
        default_factory=lambda: get_env_var("LOG_LEVEL", "INFO", validator=log_level_validator)
    )


def get_app_config() -> AppConfig:
    """Get the comprehensive application configuration."""
    return AppConfig()
