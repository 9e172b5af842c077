"""Mint: buy outcome tokens of one side against the bonding curve.

Steps (all-or-nothing):
- Take fee from the native collateral (round down), convert the net to 18 decimals
- Price the mint on the curve (other side held fixed)
- Pull collateral_in from the holder (nothing mutated yet if this fails)
- Credit minted tokens, then commit the updated record
- If the credit or the commit fails, undo the credit and refund the collateral
"""
import logging
from dataclasses import dataclass, replace

from src.pm_account.domain.repository import CollateralAssetProtocol, OutcomeTokenLedgerProtocol
from src.pm_clearing.domain import curve
from src.pm_clearing.domain.fee import split_fee
from src.pm_common.enums import Outcome
from src.pm_common.errors import InvalidAmountError, InvalidSideError
from src.pm_common.fixed_point import checked_add, to_internal
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketCommit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MintQuote:
    market_id: str
    token_id: int
    outcome: Outcome
    collateral_in: int          # native, fee included
    fee: int                    # native
    net_collateral: int         # 18-decimal, credited to the curve
    minted: int                 # 18-decimal tokens
    state_after: curve.CurveState


def quote_mint(market: Market, token_id: int, collateral_in: int, fee_bps: int) -> MintQuote:
    """Price a mint without side effects. Raises InvalidAmountError / InvalidSideError."""
    if collateral_in <= 0:
        raise InvalidAmountError(f"collateral amount must be positive, got {collateral_in}")
    outcome = market.outcome_of(token_id)
    if outcome is None:
        raise InvalidSideError(token_id, market.id)

    net_native, fee = split_fee(collateral_in, fee_bps)
    net = to_internal(net_native, market.collateral_decimals)

    minted = curve.mint_for(outcome, market.yes_supply, market.no_supply, net)
    if minted == 0:
        raise InvalidAmountError(f"collateral {collateral_in} is too small to mint any tokens")

    state = curve.CurveState(market.yes_supply, market.no_supply, market.reserve)
    return MintQuote(
        market_id=market.id,
        token_id=token_id,
        outcome=outcome,
        collateral_in=collateral_in,
        fee=fee,
        net_collateral=net,
        minted=minted,
        state_after=curve.apply_mint(state, outcome, minted),
    )


async def execute_mint(
    market: Market,
    holder: str,
    token_id: int,
    collateral_in: int,
    fee_bps: int,
    ledger: OutcomeTokenLedgerProtocol,
    asset: CollateralAssetProtocol,
    commit: MarketCommit | None = None,
) -> tuple[Market, MintQuote]:
    """Execute a mint within the caller's market lock.

    Returns (updated market, realized quote). The market passed in is not mutated.
    `commit` persists the updated record; when it raises, the mint is undone.
    """
    quote = quote_mint(market, token_id, collateral_in, fee_bps)
    state = quote.state_after
    updated = replace(
        market,
        yes_supply=state.yes_supply,
        no_supply=state.no_supply,
        reserve=state.reserve,
        collateral_balance=checked_add(market.collateral_balance, collateral_in - quote.fee),
        fees_accrued=checked_add(market.fees_accrued, quote.fee),
    )

    await asset.transfer_in(holder, collateral_in)
    try:
        await ledger.credit(holder, token_id, quote.minted)
        try:
            if commit is not None:
                await commit(updated)
        except Exception:
            await ledger.debit(holder, token_id, quote.minted)
            raise
    except Exception:
        logger.warning(
            "Mint failed after collateral moved, refunding: market=%s holder=%s amount=%d",
            market.id, holder, collateral_in,
        )
        await asset.transfer_out(holder, collateral_in)
        raise

    logger.info(
        "Mint: market=%s holder=%s side=%s in=%d fee=%d minted=%d reserve=%d",
        market.id, holder, quote.outcome.value, collateral_in, quote.fee,
        quote.minted, state.reserve,
    )
    return updated, quote
