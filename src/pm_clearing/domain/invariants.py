"""Market invariant verification after each committed operation."""

import logging

from src.pm_account.domain.repository import OutcomeTokenLedgerProtocol
from src.pm_clearing.domain.curve import reserve_for
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)

CURVE_TOLERANCE = 1


async def check_market_invariants(
    market: Market, ledger: OutcomeTokenLedgerProtocol
) -> list[str]:
    """Return violation strings (empty when the market is consistent).

    INV-1: yes_supply / no_supply == ledger total supply of each outcome token
    INV-2: while unsettled, |isqrt(yes^2 + no^2) - reserve| <= 1
    INV-3: once settled, reserve never exceeds reserve_at_settlement
    INV-4: reserve, supplies, collateral_balance and fees_accrued are non-negative
    """
    violations: list[str] = []
    mid = market.id

    yes_total = await ledger.total_supply(market.yes_token_id)
    no_total = await ledger.total_supply(market.no_token_id)
    if yes_total != market.yes_supply:
        violations.append(
            f"INV-1 violated ({mid}): yes_supply={market.yes_supply} != ledger={yes_total}"
        )
    if no_total != market.no_supply:
        violations.append(
            f"INV-1 violated ({mid}): no_supply={market.no_supply} != ledger={no_total}"
        )

    if not market.settled:
        expected = reserve_for(market.yes_supply, market.no_supply)
        if abs(expected - market.reserve) > CURVE_TOLERANCE:
            violations.append(
                f"INV-2 violated ({mid}): reserve={market.reserve} != isqrt(yes^2+no^2)={expected}"
            )
    elif market.reserve_at_settlement is not None and market.reserve > market.reserve_at_settlement:
        violations.append(
            f"INV-3 violated ({mid}): reserve={market.reserve} > "
            f"reserve_at_settlement={market.reserve_at_settlement}"
        )

    for name in ("reserve", "yes_supply", "no_supply", "collateral_balance", "fees_accrued"):
        if getattr(market, name) < 0:
            violations.append(f"INV-4 violated ({mid}): {name}={getattr(market, name)} < 0")

    if violations:
        for msg in violations:
            logger.error(msg)
    else:
        logger.debug(
            "Invariants OK: market=%s, reserve=%d, yes=%d, no=%d",
            mid, market.reserve, market.yes_supply, market.no_supply,
        )
    return violations
