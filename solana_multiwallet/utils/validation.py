"""Validation utilities for the multi-wallet orchestrator.

This module provides checks for base58 identifiers and numeric bounds.
"""

import math
import re
from typing import Optional

from solana_multiwallet.constants import MAX_PERCENTAGE, PRIVATE_KEY_PATTERN, PUBKEY_PATTERN

_PUBKEY_RE = re.compile(PUBKEY_PATTERN)
_PRIVATE_KEY_RE = re.compile(PRIVATE_KEY_PATTERN)


def validate_public_key(pubkey: str) -> bool:
    """Validate a Solana public key.

    Args:
        pubkey: The public key to validate

    Returns:
        True if the public key is valid, False otherwise
    """
    if not pubkey or not isinstance(pubkey, str):
        return False
    return bool(_PUBKEY_RE.match(pubkey))


def validate_private_key(private_key: str) -> bool:
    """Check that a string looks like a base58 encoded 64-byte secret key."""
    if not private_key or not isinstance(private_key, str):
        return False
    return bool(_PRIVATE_KEY_RE.match(private_key))


def is_valid_percentage(value: float) -> bool:
    """Return True for a finite percentage in (0, 100]."""
    return is_positive_number(value) and value <= MAX_PERCENTAGE


def is_positive_number(value: float, upper: Optional[float] = None) -> bool:
    """Return True for a finite number above zero and, if given, not above ``upper``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if math.isnan(value) or math.isinf(value) or value <= 0:
        return False
    return upper is None or value <= upper


def short_address(address: str) -> str:
    """Abbreviate an address for log lines and messages."""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"
