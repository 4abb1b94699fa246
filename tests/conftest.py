"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    wallet_factory,
    wallets,
    rich_snapshot,
    trading_client,
    jito_relay,
    rpc_relay,
    adapter_context,
)
