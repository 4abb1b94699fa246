"""Solana Multi-Wallet Package.

This package drives batched buy/sell/transfer/burn/deploy operations across
many Solana wallets at once: capacity checks, percentage fan-out between
seller and buyer wallets, local signing of builder-produced bundles and a
sequential, throttled executor that aggregates partial success.
"""

import logging

__version__ = "0.1.0"
__author__ = "Solana Multi-Wallet Team"
__email__ = "dev@solana-multiwallet.local"

logger = logging.getLogger(__name__)
