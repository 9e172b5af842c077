"""Pythagorean bonding curve for binary outcome tokens.

Invariant:  reserve^2 = yes_supply^2 + no_supply^2
Price:      p_side = supply_side / reserve        (so p_yes^2 + p_no^2 = 1)

All functions are pure over explicit (yes_supply, no_supply) integers at the
18-decimal scale; callers commit the resulting CurveState themselves. Every
square root truncates, so minted amounts and collateral paid out are rounded
down and the curve never gives away more than it receives.
"""

from dataclasses import dataclass

from src.pm_common.enums import Outcome
from src.pm_common.errors import InsufficientSupplyError, InvalidAmountError, InvalidLiquidityError
from src.pm_common.fixed_point import WAD, checked_add, checked_mul, checked_sub, isqrt, mul_div


@dataclass(frozen=True)
class CurveState:
    yes_supply: int
    no_supply: int
    reserve: int

    def supply_of(self, side: Outcome) -> int:
        return self.yes_supply if side is Outcome.YES else self.no_supply


def _split(side: Outcome, yes_supply: int, no_supply: int) -> tuple[int, int]:
    """Return (same_side, other_side) supplies."""
    if side is Outcome.YES:
        return yes_supply, no_supply
    if side is Outcome.NO:
        return no_supply, yes_supply
    raise ValueError(f"no curve side for {side}")


def _join(side: Outcome, same: int, other: int) -> tuple[int, int]:
    return (same, other) if side is Outcome.YES else (other, same)


def reserve_for(yes_supply: int, no_supply: int) -> int:
    return isqrt(checked_add(checked_mul(yes_supply, yes_supply), checked_mul(no_supply, no_supply)))


def price_of(side: Outcome, yes_supply: int, no_supply: int) -> int:
    """Marginal collateral cost per token of `side`, WAD-scaled, in [0, WAD]."""
    same, _ = _split(side, yes_supply, no_supply)
    reserve = reserve_for(yes_supply, no_supply)
    if reserve == 0:
        return 0
    # same <= reserve always (isqrt(same^2 + other^2) >= same)
    return mul_div(same, WAD, reserve)


def mint_for(side: Outcome, yes_supply: int, no_supply: int, net_collateral_in: int) -> int:
    """Tokens of `side` minted for net_collateral_in (18-decimal).

    Solves isqrt(s'^2 + other^2) == reserve + net for the new same-side supply s',
    holding the other side fixed: s' = isqrt((reserve + net)^2 - other^2).
    """
    if net_collateral_in <= 0:
        raise InvalidAmountError(f"net collateral must be positive, got {net_collateral_in}")
    same, other = _split(side, yes_supply, no_supply)
    reserve = reserve_for(yes_supply, no_supply)
    new_reserve = checked_add(reserve, net_collateral_in)
    new_same = isqrt(checked_sub(checked_mul(new_reserve, new_reserve), checked_mul(other, other)))
    # isqrt floors; new_same >= same holds for any net >= 1
    return checked_sub(new_same, same)


def burn_for(side: Outcome, yes_supply: int, no_supply: int, burn_amount: int) -> int:
    """Collateral (18-decimal) released by burning burn_amount tokens of `side`."""
    if burn_amount <= 0:
        raise InvalidAmountError(f"burn amount must be positive, got {burn_amount}")
    same, other = _split(side, yes_supply, no_supply)
    if burn_amount > same:
        raise InsufficientSupplyError(requested=burn_amount, supply=same)
    old_reserve = reserve_for(yes_supply, no_supply)
    new_yes, new_no = _join(side, same - burn_amount, other)
    return checked_sub(old_reserve, reserve_for(new_yes, new_no))


def seed(liquidity: int) -> CurveState:
    """Initial state for a fresh market: both sides at `liquidity`, reserve = L * sqrt(2)."""
    if liquidity <= 0:
        raise InvalidLiquidityError(liquidity)
    return CurveState(
        yes_supply=liquidity,
        no_supply=liquidity,
        reserve=reserve_for(liquidity, liquidity),
    )


def apply_mint(state: CurveState, side: Outcome, minted: int) -> CurveState:
    same, other = _split(side, state.yes_supply, state.no_supply)
    yes, no = _join(side, checked_add(same, minted), other)
    return CurveState(yes_supply=yes, no_supply=no, reserve=reserve_for(yes, no))


def apply_burn(state: CurveState, side: Outcome, burned: int) -> CurveState:
    same, other = _split(side, state.yes_supply, state.no_supply)
    if burned > same:
        raise InsufficientSupplyError(requested=burned, supply=same)
    yes, no = _join(side, same - burned, other)
    return CurveState(yes_supply=yes, no_supply=no, reserve=reserve_for(yes, no))
