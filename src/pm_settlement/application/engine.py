"""SettlementEngine: Open -> Closed(by time) -> Settled -> (Redeeming)*.

settle() is settler-only and moves no funds; redeem() pays each winning holder
its pro-rata share; withdraw_fees() drains the market's fee sink to the settler.
All three run under the same per-market lock as trading.
"""
import logging
from dataclasses import replace

from src.pm_account.domain.repository import OutcomeTokenLedgerProtocol
from src.pm_account.infrastructure.collateral import CollateralAssetRegistry
from src.pm_clearing.domain.invariants import check_market_invariants
from src.pm_clearing.domain.settlement import RedemptionQuote, execute_redemption, settle_market
from src.pm_common.context import ExchangeContext
from src.pm_common.datetime_utils import utc_now
from src.pm_common.errors import InvariantViolationError, NotSettlerError
from src.pm_common.events import EventBus, FeesWithdrawn, MarketSettled, PositionRedeemed
from src.pm_market.application.service import MarketRegistry
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


class SettlementEngine:
    def __init__(
        self,
        registry: MarketRegistry,
        ledger: OutcomeTokenLedgerProtocol,
        assets: CollateralAssetRegistry,
        events: EventBus,
        context: ExchangeContext,
        verify_invariants: bool = True,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._assets = assets
        self._events = events
        self._context = context
        self._verify_invariants = verify_invariants

    def _require_settler(self, caller: str, action: str) -> None:
        if not self._context.is_settler(caller):
            logger.warning("Rejected %s from non-settler %s", action, caller)
            raise NotSettlerError(caller)

    async def _commit(self, market: Market) -> None:
        if self._verify_invariants:
            violations = await check_market_invariants(market, self._ledger)
            if violations:
                raise InvariantViolationError(violations)
        await self._registry.save(market)

    async def settle(self, caller: str, market_id: str, winning_token_id: int) -> Market:
        self._require_settler(caller, "settlement")
        async with self._registry.locked_market(market_id) as market:
            updated = settle_market(
                market, winning_token_id, now=self._registry.now(), settled_at=utc_now()
            )
            await self._commit(updated)

        logger.info(
            "Market settled: id=%s outcome=%s reserve=%d",
            market_id, updated.winning_outcome.value, updated.reserve,
        )
        self._events.publish(
            MarketSettled(
                market_id=market_id,
                winning_token_id=winning_token_id,
                outcome=updated.winning_outcome,
                settler=caller,
                reserve=updated.reserve,
            )
        )
        return updated

    async def redeem(self, caller: str, market_id: str) -> RedemptionQuote:
        async with self._registry.locked_market(market_id) as market:
            asset = self._assets.resolve(market.collateral_asset)
            updated, quote = await execute_redemption(
                market, caller, self._ledger, asset, commit=self._commit
            )

        self._events.publish(
            PositionRedeemed(
                market_id=market_id,
                holder=caller,
                token_id=quote.token_id,
                burned=quote.burned,
                amount=quote.payout,
                reserve=updated.reserve,
            )
        )
        return quote

    async def withdraw_fees(self, caller: str, market_id: str) -> int:
        """Transfer the market's accrued fees to the settler. Returns the amount (native)."""
        self._require_settler(caller, "fee withdrawal")
        async with self._registry.locked_market(market_id) as market:
            amount = market.fees_accrued
            if amount > 0:
                asset = self._assets.resolve(market.collateral_asset)
                await self._commit(replace(market, fees_accrued=0))
                try:
                    await asset.transfer_out(caller, amount)
                except Exception:
                    logger.warning(
                        "Fee payout failed, restoring fee sink: market=%s amount=%d",
                        market_id, amount,
                    )
                    await self._commit(market)
                    raise

        logger.info("Fees withdrawn: market=%s recipient=%s amount=%d", market_id, caller, amount)
        self._events.publish(FeesWithdrawn(market_id=market_id, recipient=caller, amount=amount))
        return amount
