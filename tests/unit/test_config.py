"""Unit tests for configuration loading."""

from unittest.mock import patch

import pytest

from solana_multiwallet.config import (
    ExecutorConfig,
    TradingServerConfig,
    float_validator,
    get_env_var,
    get_executor_config,
    get_trading_server_config,
    int_validator,
    log_level_validator,
    normalize_server_url,
)
from solana_multiwallet.utils.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clear_config_cache():
    get_trading_server_config.cache_clear()
    get_executor_config.cache_clear()
    yield
    get_trading_server_config.cache_clear()
    get_executor_config.cache_clear()


class TestNormalizeServerUrl:
    """Test suite for trading server URL normalization."""

    @pytest.mark.parametrize("raw,expected", [
        ("localhost:8888", "http://localhost:8888"),
        ("https://localhost:8888/", "http://localhost:8888"),
        ("127.0.0.1:3000", "http://127.0.0.1:3000"),
        ("10.0.0.5", "http://10.0.0.5"),
        ("builder.example.com", "https://builder.example.com"),
        ("http://builder.example.com/api/", "https://builder.example.com/api"),
    ])
    def test_scheme_follows_host(self, raw, expected):
        assert normalize_server_url(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "http://", "localhost:notaport"])
    def test_invalid(self, raw):
        with pytest.raises(ConfigurationError):
            normalize_server_url(raw)


class TestEnvironment:
    """Test suite for environment-based configuration."""

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = get_trading_server_config()

        assert config.base_url == "http://localhost:8888"
        assert config.api_key is None
        assert config.max_retries == 3

    def test_overrides(self):
        env = {
            "TRADING_SERVER_URL": "builder.example.com",
            "TRADING_SERVER_API_KEY": "secret",
            "TRADING_SERVER_MAX_RETRIES": "1",
        }
        with patch.dict("os.environ", env, clear=True):
            config = get_trading_server_config()

        assert config.base_url == "https://builder.example.com"
        assert config.api_key == "secret"
        assert config.max_retries == 1

    def test_executor_settings(self):
        env = {"INTER_UNIT_DELAY": "0.25", "BALANCE_CONCURRENCY": "4"}
        with patch.dict("os.environ", env, clear=True):
            config = get_executor_config()

        assert config.inter_unit_delay == 0.25
        assert config.balance_concurrency == 4
        assert config.default_slippage_bps == 9900

    def test_bad_value_names_the_variable(self):
        with patch.dict("os.environ", {"INTER_UNIT_DELAY": "soon"}, clear=True):
            with pytest.raises(ValueError, match="INTER_UNIT_DELAY"):
                get_executor_config()

    def test_required_variable(self):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ValueError):
                get_env_var("JITO_BUNDLE_URL", required=True)


class TestValidators:
    """Test suite for value validators."""

    def test_int_validator(self):
        assert int_validator("5") == 5
        with pytest.raises(ValueError):
            int_validator("5.5")

    def test_float_validator_rejects_negative(self):
        assert float_validator("0") == 0
        with pytest.raises(ValueError):
            float_validator("-1")

    def test_log_level_validator(self):
        assert log_level_validator("debug") == "DEBUG"
        with pytest.raises(ValueError):
            log_level_validator("verbose")


class TestDataclassValidation:
    """Test suite for config dataclass checks."""

    def test_negative_delay(self):
        with pytest.raises(ConfigurationError):
            ExecutorConfig(inter_unit_delay=-0.5)

    def test_zero_concurrency(self):
        with pytest.raises(ConfigurationError):
            ExecutorConfig(balance_concurrency=0)

    def test_slippage_range(self):
        with pytest.raises(ConfigurationError):
            ExecutorConfig(default_slippage_bps=10_001)

    def test_negative_retries(self):
        with pytest.raises(ConfigurationError):
            TradingServerConfig(max_retries=-1)
