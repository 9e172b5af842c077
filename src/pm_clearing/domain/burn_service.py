"""Burn: sell outcome tokens of one side back to the bonding curve.

Steps (all-or-nothing):
- Check the holder's balance, price the burn on the curve (18 decimals)
- Convert the gross payout to native units (round down), take the fee (round down)
- The market's own collateral must cover the gross payout
- Debit the tokens and commit the updated record, then pay out
- If the commit fails, re-credit the tokens; if the payout fails, re-credit the
  tokens and commit the original record again

Schema notes:
- reserve drops by the full curve delta; the fee stays in custody as fees_accrued
"""
import logging
from dataclasses import dataclass, replace

from src.pm_account.domain.repository import CollateralAssetProtocol, OutcomeTokenLedgerProtocol
from src.pm_clearing.domain import curve
from src.pm_clearing.domain.fee import split_fee
from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    InsufficientBalanceError,
    InsufficientCollateralError,
    InvalidAmountError,
    InvalidSideError,
)
from src.pm_common.fixed_point import checked_add, checked_sub, to_native
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketCommit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BurnQuote:
    market_id: str
    token_id: int
    outcome: Outcome
    burned: int                 # 18-decimal tokens
    gross_collateral: int       # 18-decimal curve delta
    gross_native: int           # native, before fee
    fee: int                    # native
    payout: int                 # native, paid to the holder
    state_after: curve.CurveState


def quote_burn(market: Market, token_id: int, token_amount: int, fee_bps: int) -> BurnQuote:
    """Price a burn without side effects."""
    if token_amount <= 0:
        raise InvalidAmountError(f"token amount must be positive, got {token_amount}")
    outcome = market.outcome_of(token_id)
    if outcome is None:
        raise InvalidSideError(token_id, market.id)

    gross = curve.burn_for(outcome, market.yes_supply, market.no_supply, token_amount)
    gross_native = to_native(gross, market.collateral_decimals)
    payout, fee = split_fee(gross_native, fee_bps)

    state = curve.CurveState(market.yes_supply, market.no_supply, market.reserve)
    return BurnQuote(
        market_id=market.id,
        token_id=token_id,
        outcome=outcome,
        burned=token_amount,
        gross_collateral=gross,
        gross_native=gross_native,
        fee=fee,
        payout=payout,
        state_after=curve.apply_burn(state, outcome, token_amount),
    )


async def execute_burn(
    market: Market,
    holder: str,
    token_id: int,
    token_amount: int,
    fee_bps: int,
    ledger: OutcomeTokenLedgerProtocol,
    asset: CollateralAssetProtocol,
    commit: MarketCommit | None = None,
) -> tuple[Market, BurnQuote]:
    """Execute a burn within the caller's market lock.

    Returns (updated market, realized quote). Raises AppError on validation failure.
    `commit` persists a market record; when it raises, the burn is undone.
    """
    if token_amount <= 0:
        raise InvalidAmountError(f"token amount must be positive, got {token_amount}")
    if market.outcome_of(token_id) is None:
        raise InvalidSideError(token_id, market.id)

    balance = await ledger.balance_of(holder, token_id)
    if balance < token_amount:
        raise InsufficientBalanceError(required=token_amount, available=balance)

    quote = quote_burn(market, token_id, token_amount, fee_bps)
    if quote.gross_native > market.collateral_balance:
        raise InsufficientCollateralError(
            market.id, required=quote.gross_native, available=market.collateral_balance
        )

    state = quote.state_after
    updated = replace(
        market,
        yes_supply=state.yes_supply,
        no_supply=state.no_supply,
        reserve=state.reserve,
        collateral_balance=checked_sub(market.collateral_balance, quote.gross_native),
        fees_accrued=checked_add(market.fees_accrued, quote.fee),
    )

    await ledger.debit(holder, token_id, token_amount)
    try:
        if commit is not None:
            await commit(updated)
    except Exception:
        logger.warning(
            "Burn commit failed, restoring tokens: market=%s holder=%s amount=%d",
            market.id, holder, token_amount,
        )
        await ledger.credit(holder, token_id, token_amount)
        raise

    try:
        if quote.payout > 0:
            await asset.transfer_out(holder, quote.payout)
    except Exception:
        logger.warning(
            "Burn payout failed, restoring tokens: market=%s holder=%s amount=%d",
            market.id, holder, token_amount,
        )
        await ledger.credit(holder, token_id, token_amount)
        if commit is not None:
            await commit(market)
        raise

    logger.info(
        "Burn: market=%s holder=%s side=%s burned=%d gross=%d fee=%d payout=%d reserve=%d",
        market.id, holder, quote.outcome.value, token_amount, quote.gross_native,
        quote.fee, quote.payout, state.reserve,
    )
    return updated, quote
