"""Pythagorean bonding curve: pricing, minting and burning over explicit supplies."""

import pytest

from src.pm_clearing.domain import curve
from src.pm_common.enums import Outcome
from src.pm_common.errors import InsufficientSupplyError, InvalidAmountError, InvalidLiquidityError
from src.pm_common.fixed_point import WAD, isqrt, wad_to_display

L = 10_000 * 10**12
SEED_RESERVE = 14142135623730950  # isqrt(2 * L^2)


def _price_tolerance(reserve: int) -> int:
    """Bound on |p_yes^2 + p_no^2 - WAD^2| from the two floor divisions and the floored root."""
    return 4 * WAD * (WAD // reserve + 2)


class TestSeed:
    def test_both_sides_equal_liquidity(self) -> None:
        state = curve.seed(L)
        assert state.yes_supply == L
        assert state.no_supply == L
        assert state.reserve == SEED_RESERVE

    def test_seed_prices_are_one_over_root_two(self) -> None:
        yes = curve.price_of(Outcome.YES, L, L)
        no = curve.price_of(Outcome.NO, L, L)
        assert yes == no
        assert abs(yes - 707106781186547524) < 10**4
        assert wad_to_display(yes) == "0.707106"

    @pytest.mark.parametrize("liquidity", [0, -1])
    def test_non_positive_liquidity_rejected(self, liquidity: int) -> None:
        with pytest.raises(InvalidLiquidityError):
            curve.seed(liquidity)


class TestPrice:
    def test_empty_curve_prices_zero(self) -> None:
        assert curve.price_of(Outcome.YES, 0, 0) == 0
        assert curve.price_of(Outcome.NO, 0, 0) == 0

    def test_one_sided_curve(self) -> None:
        assert curve.price_of(Outcome.YES, 5 * WAD, 0) == WAD
        assert curve.price_of(Outcome.NO, 5 * WAD, 0) == 0

    @pytest.mark.parametrize(
        "yes,no",
        [(L, L), (3 * WAD, 4 * WAD), (L, 1), (7 * 10**20, 2 * 10**15), (10**30, 10**29)],
    )
    def test_squares_sum_to_one(self, yes: int, no: int) -> None:
        p_yes = curve.price_of(Outcome.YES, yes, no)
        p_no = curve.price_of(Outcome.NO, yes, no)
        assert 0 <= p_yes <= WAD
        assert 0 <= p_no <= WAD
        reserve = curve.reserve_for(yes, no)
        assert abs(p_yes * p_yes + p_no * p_no - WAD * WAD) <= _price_tolerance(reserve)

    def test_three_four_five(self) -> None:
        assert curve.reserve_for(3 * WAD, 4 * WAD) == 5 * WAD
        assert curve.price_of(Outcome.YES, 3 * WAD, 4 * WAD) == 6 * WAD // 10
        assert curve.price_of(Outcome.NO, 3 * WAD, 4 * WAD) == 8 * WAD // 10


class TestMint:
    def test_reserve_grows_by_net_collateral(self) -> None:
        net = 1_000 * 10**12
        minted = curve.mint_for(Outcome.YES, L, L, net)
        assert minted > 0
        after = curve.apply_mint(curve.seed(L), Outcome.YES, minted)
        assert after.no_supply == L
        assert SEED_RESERVE + net - 1 <= after.reserve <= SEED_RESERVE + net
        assert after.reserve == isqrt(after.yes_supply**2 + after.no_supply**2)

    def test_mint_moves_prices(self) -> None:
        minted = curve.mint_for(Outcome.YES, L, L, 5_000 * 10**12)
        after = curve.apply_mint(curve.seed(L), Outcome.YES, minted)
        assert curve.price_of(Outcome.YES, after.yes_supply, after.no_supply) > curve.price_of(
            Outcome.YES, L, L
        )
        assert curve.price_of(Outcome.NO, after.yes_supply, after.no_supply) < curve.price_of(
            Outcome.NO, L, L
        )

    def test_marginal_cost_at_least_price(self) -> None:
        # tokens per unit collateral never exceed 1 / price
        net = 10**12
        minted = curve.mint_for(Outcome.NO, L, L, net)
        price = curve.price_of(Outcome.NO, L, L)
        assert minted * price <= net * WAD + WAD

    def test_first_mint_on_empty_curve_is_one_to_one(self) -> None:
        assert curve.mint_for(Outcome.YES, 0, 0, 42 * WAD) == 42 * WAD

    @pytest.mark.parametrize("net", [0, -5])
    def test_non_positive_collateral_rejected(self, net: int) -> None:
        with pytest.raises(InvalidAmountError):
            curve.mint_for(Outcome.YES, L, L, net)


class TestBurn:
    def test_burn_whole_side(self) -> None:
        # reserve drops from L*sqrt(2) to L
        assert curve.burn_for(Outcome.YES, L, L, L) == SEED_RESERVE - L

    def test_mint_then_burn_never_profits(self) -> None:
        net = 2_500 * 10**12
        minted = curve.mint_for(Outcome.YES, L, L, net)
        after = curve.apply_mint(curve.seed(L), Outcome.YES, minted)
        back = curve.burn_for(Outcome.YES, after.yes_supply, after.no_supply, minted)
        assert back <= net

    def test_burn_more_than_supply_raises(self) -> None:
        with pytest.raises(InsufficientSupplyError) as exc_info:
            curve.burn_for(Outcome.NO, L, L, L + 1)
        assert exc_info.value.code == 4004

    def test_zero_burn_rejected(self) -> None:
        with pytest.raises(InvalidAmountError):
            curve.burn_for(Outcome.NO, L, L, 0)

    def test_apply_burn_keeps_curve(self) -> None:
        after = curve.apply_burn(curve.seed(L), Outcome.NO, L // 3)
        assert after.yes_supply == L
        assert after.no_supply == L - L // 3
        assert after.reserve == curve.reserve_for(after.yes_supply, after.no_supply)
