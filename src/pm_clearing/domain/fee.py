"""Take-fee calculation for mints and burns (native collateral units)."""

from src.pm_common.context import BPS_DENOMINATOR


def calc_fee(amount: int, fee_bps: int) -> int:
    """Truncating fee: amount x fee_bps // 10000."""
    if amount <= 0 or fee_bps <= 0:
        return 0
    return amount * fee_bps // BPS_DENOMINATOR


def split_fee(amount: int, fee_bps: int) -> tuple[int, int]:
    """Return (net, fee) with net + fee == amount."""
    fee = calc_fee(amount, fee_bps)
    return amount - fee, fee
