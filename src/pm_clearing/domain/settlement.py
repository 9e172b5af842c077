"""Market settlement and pro-rata redemption of winning tokens."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from src.pm_account.domain.repository import CollateralAssetProtocol, OutcomeTokenLedgerProtocol
from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    AlreadySettledError,
    InvalidSideError,
    MarketNotSettledError,
    MarketStillOpenError,
    NoWinningTokensError,
)
from src.pm_common.fixed_point import checked_sub, mul_div, to_internal, to_native
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketCommit

logger = logging.getLogger(__name__)


def settle_market(
    market: Market, winning_token_id: int, now: int, settled_at: datetime
) -> Market:
    """Fix the winning side. Moves no funds; returns the updated record."""
    if now < market.end_time:
        raise MarketStillOpenError(market.id)
    if market.settled:
        raise AlreadySettledError(market.id)
    outcome = market.outcome_of(winning_token_id)
    if outcome is None:
        raise InvalidSideError(winning_token_id, market.id)
    return replace(
        market,
        settled=True,
        winning_outcome=outcome,
        reserve_at_settlement=market.reserve,
        settled_at=settled_at,
    )


@dataclass(frozen=True)
class RedemptionQuote:
    market_id: str
    holder: str
    token_id: int
    outcome: Outcome
    burned: int                 # 18-decimal winning tokens
    reserve_share: int          # 18-decimal, removed from reserve
    payout_internal: int        # 18-decimal
    payout: int                 # native, paid to the holder


def quote_redemption(
    market: Market, holder: str, balance: int, winning_supply: int
) -> RedemptionQuote:
    """Pro-rata share of the reserve for `balance` winning tokens.

    share  = reserve * balance / winning_supply
    payout = min(share, collateral * balance / winning_supply)

    The collateral bound applies when the curve reserve overstates what the market
    actually holds; both terms shrink proportionally on every redemption, so each
    remaining holder keeps the same per-token rate.
    """
    if not market.settled:
        raise MarketNotSettledError(market.id)
    if balance <= 0:
        raise NoWinningTokensError(holder, market.id)
    reserve_share = mul_div(market.reserve, balance, winning_supply)
    collateral = to_internal(market.collateral_balance, market.collateral_decimals)
    payout_internal = min(reserve_share, mul_div(collateral, balance, winning_supply))
    return RedemptionQuote(
        market_id=market.id,
        holder=holder,
        token_id=market.token_of(market.winning_outcome),
        outcome=market.winning_outcome,
        burned=balance,
        reserve_share=reserve_share,
        payout_internal=payout_internal,
        payout=to_native(payout_internal, market.collateral_decimals),
    )


async def execute_redemption(
    market: Market,
    holder: str,
    ledger: OutcomeTokenLedgerProtocol,
    asset: CollateralAssetProtocol,
    commit: MarketCommit | None = None,
) -> tuple[Market, RedemptionQuote]:
    """Burn the holder's whole winning balance and pay its share. Losing balances are untouched.

    Tokens are debited and the record committed before the payout; a failed commit
    or payout restores the tokens (and the original record).
    """
    if not market.settled:
        raise MarketNotSettledError(market.id)
    winning_token = market.token_of(market.winning_outcome)
    balance = await ledger.balance_of(holder, winning_token)
    if balance == 0:
        raise NoWinningTokensError(holder, market.id)
    winning_supply = await ledger.total_supply(winning_token)

    quote = quote_redemption(market, holder, balance, winning_supply)

    if quote.outcome is Outcome.YES:
        supplies = {"yes_supply": checked_sub(market.yes_supply, balance)}
    else:
        supplies = {"no_supply": checked_sub(market.no_supply, balance)}
    updated = replace(
        market,
        reserve=checked_sub(market.reserve, quote.reserve_share),
        collateral_balance=checked_sub(market.collateral_balance, quote.payout),
        **supplies,
    )

    await ledger.debit(holder, winning_token, balance)
    try:
        if commit is not None:
            await commit(updated)
    except Exception:
        logger.warning(
            "Redemption commit failed, restoring tokens: market=%s holder=%s",
            market.id, holder,
        )
        await ledger.credit(holder, winning_token, balance)
        raise

    try:
        if quote.payout > 0:
            await asset.transfer_out(holder, quote.payout)
    except Exception:
        logger.warning(
            "Redemption payout failed, restoring tokens: market=%s holder=%s",
            market.id, holder,
        )
        await ledger.credit(holder, winning_token, balance)
        if commit is not None:
            await commit(market)
        raise

    logger.info(
        "Redeem: market=%s holder=%s burned=%d payout=%d reserve=%d",
        market.id, holder, balance, quote.payout, updated.reserve,
    )
    return updated, quote
