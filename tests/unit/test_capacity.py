"""Unit tests for wallet capacity validation."""

import pytest

from solana_multiwallet.capacity import (
    CAPACITY_TABLE,
    check_capacity_coverage,
    count_active_wallets,
    get_active_wallets,
    validate_capacity,
)
from solana_multiwallet.models.operations import OperationKind
from solana_multiwallet.models.wallet import WalletHandle
from solana_multiwallet.services.adapters.registry import DEFAULT_FACTORIES
from solana_multiwallet.utils.errors import ConfigurationError


def _wallets(active: int, inactive: int = 0):
    return (
        [WalletHandle.generate() for _ in range(active)]
        + [WalletHandle.generate(is_active=False) for _ in range(inactive)]
    )


class TestValidateCapacity:
    """Test suite for validate_capacity."""

    def test_over_ceiling_is_rejected(self):
        check = validate_capacity(_wallets(121), OperationKind.BUY_RAYDIUM)

        assert check.ok is False
        assert check.active_count == 121
        assert check.ceiling == 120
        assert check.message == (
            "Error: Too many active wallets (121). Maximum allowed for buy@raydium is 120"
        )

    def test_at_ceiling_is_accepted(self):
        check = validate_capacity(_wallets(5), OperationKind.DEPLOY_PUMP)

        assert check.ok is True
        assert check.message == "Valid: 5 active wallets (max 5)"

    def test_inactive_wallets_are_not_counted(self):
        wallets = _wallets(active=2, inactive=4)
        check = validate_capacity(wallets, OperationKind.DEPLOY_PUMP)

        assert check.active_count == 2
        assert check.ok is True

    @pytest.mark.parametrize("active,ceiling", [(0, 0), (1, 0), (3, 3), (4, 3)])
    def test_ok_matches_count_against_ceiling(self, active, ceiling):
        table = {OperationKind.BURN: ceiling}
        check = validate_capacity(_wallets(active, 2), OperationKind.BURN, table)

        assert check.ok == (active <= ceiling)

    def test_unconfigured_kind_defaults_to_zero(self):
        check = validate_capacity(_wallets(1), OperationKind.BURN, table={})

        assert check.ceiling == 0
        assert check.ok is False

    def test_repeated_calls_give_identical_results(self):
        wallets = _wallets(7, 3)
        assert validate_capacity(wallets, OperationKind.SELL_PUMPFUN) == \
            validate_capacity(wallets, OperationKind.SELL_PUMPFUN)

    def test_does_not_mutate_input(self):
        wallets = _wallets(2, 1)
        before = list(wallets)
        validate_capacity(wallets, OperationKind.BUY_JUPITER)
        assert wallets == before


class TestCapacityTable:
    """Test suite for the static ceiling table."""

    @pytest.mark.parametrize("kind,ceiling", [
        (OperationKind.BUY_RAYDIUM, 120),
        (OperationKind.SELL_RAYDIUM, 120),
        (OperationKind.BUY_PUMPFUN, 140),
        (OperationKind.SELL_PUMPFUN, 180),
        (OperationKind.BUY_MOONSHOT, 160),
        (OperationKind.SELL_LAUNCHPAD, 160),
        (OperationKind.BUY_JUPITER, 120),
        (OperationKind.SELL_PUMPSWAP, 120),
        (OperationKind.DEPLOY_BOOP, 15),
    ])
    def test_known_ceilings(self, kind, ceiling):
        assert CAPACITY_TABLE[kind] == ceiling

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            CAPACITY_TABLE[OperationKind.BURN] = 1000

    def test_every_registered_adapter_has_a_ceiling(self):
        check_capacity_coverage(DEFAULT_FACTORIES.keys())

    def test_coverage_check_names_missing_kinds(self):
        with pytest.raises(ConfigurationError) as exc_info:
            check_capacity_coverage(
                [OperationKind.BURN, OperationKind.TRANSFER],
                table={OperationKind.BURN: 1}
            )
        assert exc_info.value.details["kinds"] == ["transfer"]


def test_active_wallet_helpers():
    wallets = _wallets(active=3, inactive=2)

    assert count_active_wallets(wallets) == 3
    assert all(wallet.is_active for wallet in get_active_wallets(wallets))
    assert get_active_wallets(wallets) == wallets[:3]
