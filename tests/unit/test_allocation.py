"""Unit tests for fan-out allocation."""

import pytest

from solana_multiwallet.allocation import allocate, plan_fan_out
from solana_multiwallet.models.operations import BuyerConfig, SellerConfig
from solana_multiwallet.models.wallet import WalletHandle


@pytest.mark.parametrize("percentage", [0.5, 1, 33.3, 60, 99.99, 100])
@pytest.mark.parametrize("buyers", [1, 2, 3, 7, 120])
def test_shares_add_back_up(percentage, buyers):
    assert allocate(percentage, buyers) * buyers == pytest.approx(percentage)


def test_sixty_percent_across_three_buyers():
    assert allocate(60, 3) == pytest.approx(20)


def test_allocate_is_pure():
    assert allocate(45, 4) == allocate(45, 4)


class TestPlanFanOut:
    """Test suite for plan_fan_out."""

    @pytest.fixture
    def seller(self):
        return WalletHandle.generate()

    def test_equal_split_ignores_buy_percentage(self, seller):
        buyers = [
            BuyerConfig(WalletHandle.generate(), buy_percentage=10),
            BuyerConfig(WalletHandle.generate(), buy_percentage=90),
            BuyerConfig(WalletHandle.generate(), buy_percentage=50),
        ]
        legs = plan_fan_out([SellerConfig(seller, 60, tuple(buyers))])

        assert [leg.seller_share for leg in legs] == pytest.approx([20, 20, 20])
        assert [leg.buy_percentage for leg in legs] == [10, 90, 50]

    def test_legs_follow_configuration_order(self, seller):
        other_seller = WalletHandle.generate()
        buyers_a = tuple(BuyerConfig(WalletHandle.generate(), 100) for _ in range(2))
        buyers_b = tuple(BuyerConfig(WalletHandle.generate(), 100) for _ in range(3))

        legs = plan_fan_out([
            SellerConfig(seller, 50, buyers_a),
            SellerConfig(other_seller, 90, buyers_b),
        ])

        assert [leg.seller for leg in legs] == [seller] * 2 + [other_seller] * 3
        assert [leg.buyer for leg in legs] == [b.wallet for b in buyers_a + buyers_b]
        assert legs[0].seller_share == pytest.approx(25)
        assert legs[2].seller_share == pytest.approx(30)

    def test_seller_without_buyers_gets_a_placeholder_leg(self, seller):
        legs = plan_fan_out([SellerConfig(seller, 50, ())])

        assert len(legs) == 1
        assert legs[0].buyer is None
        assert "<no buyer>" in legs[0].label
