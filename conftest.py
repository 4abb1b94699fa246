"""
Root-level conftest for pytest configuration
"""
from solana_multiwallet.logging_config import configure_logging


def pytest_configure(config):
    """Run async tests without explicit loop fixtures and log at INFO."""
    config.option.asyncio_mode = "auto"
    configure_logging("INFO")
