"""TradingEngine: stateful orchestrator for per-market mint and burn."""
import logging

from src.pm_account.domain.repository import OutcomeTokenLedgerProtocol
from src.pm_account.infrastructure.collateral import CollateralAssetRegistry
from src.pm_clearing.domain.burn_service import BurnQuote, execute_burn, quote_burn
from src.pm_clearing.domain.invariants import check_market_invariants
from src.pm_clearing.domain.mint_service import MintQuote, execute_mint, quote_mint
from src.pm_common.context import ExchangeContext, validate_fee_bps
from src.pm_common.errors import InvariantViolationError, MarketClosedError, NotSettlerError
from src.pm_common.events import EventBus, FeeUpdated, TokensBurned, TokensMinted
from src.pm_market.application.service import MarketRegistry
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


class TradingEngine:
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

    @property
    def fee_bps(self) -> int:
        return self._context.fee_bps

    def _require_open(self, market: Market) -> Market:
        if not market.is_trading_open(self._registry.now()):
            raise MarketClosedError(market.id)
        return market

    async def _load_open_market(self, market_id: str) -> Market:
        return self._require_open(await self._registry.get_market(market_id))

    async def _commit(self, market: Market) -> None:
        """Check the updated record against the ledger, then persist it.

        A violation raises before the save; the clearing step undoes its moves.
        """
        if self._verify_invariants:
            violations = await check_market_invariants(market, self._ledger)
            if violations:
                raise InvariantViolationError(violations)
        await self._registry.save(market)

    async def mint(
        self, caller: str, market_id: str, collateral_in: int, token_id: int
    ) -> MintQuote:
        """Buy `token_id` tokens with `collateral_in` native collateral (fee included)."""
        async with self._registry.locked_market(market_id) as market:
            self._require_open(market)
            asset = self._assets.resolve(market.collateral_asset)
            updated, quote = await execute_mint(
                market, caller, token_id, collateral_in, self._context.fee_bps,
                self._ledger, asset, commit=self._commit,
            )

        self._events.publish(
            TokensMinted(
                market_id=market_id,
                holder=caller,
                token_id=token_id,
                outcome=quote.outcome,
                collateral_in=collateral_in,
                fee=quote.fee,
                amount=quote.minted,
                reserve=updated.reserve,
            )
        )
        return quote

    async def burn(
        self, caller: str, market_id: str, token_id: int, token_amount: int
    ) -> BurnQuote:
        """Sell `token_amount` tokens back to the curve for native collateral (fee deducted)."""
        async with self._registry.locked_market(market_id) as market:
            self._require_open(market)
            asset = self._assets.resolve(market.collateral_asset)
            updated, quote = await execute_burn(
                market, caller, token_id, token_amount, self._context.fee_bps,
                self._ledger, asset, commit=self._commit,
            )

        self._events.publish(
            TokensBurned(
                market_id=market_id,
                holder=caller,
                token_id=token_id,
                outcome=quote.outcome,
                burned=token_amount,
                fee=quote.fee,
                amount=quote.payout,
                reserve=updated.reserve,
            )
        )
        return quote

    async def quote_mint(self, market_id: str, collateral_in: int, token_id: int) -> MintQuote:
        market = await self._load_open_market(market_id)
        return quote_mint(market, token_id, collateral_in, self._context.fee_bps)

    async def quote_burn(self, market_id: str, token_id: int, token_amount: int) -> BurnQuote:
        market = await self._load_open_market(market_id)
        return quote_burn(market, token_id, token_amount, self._context.fee_bps)

    async def set_fee(self, caller: str, new_fee_bps: int) -> int:
        """Settler-only. Returns the previous fee."""
        if not self._context.is_settler(caller):
            logger.warning("Rejected fee update from non-settler %s", caller)
            raise NotSettlerError(caller)
        validate_fee_bps(new_fee_bps)
        async with self._context.fee_lock:
            old = self._context.fee_bps
            self._context.fee_bps = new_fee_bps
        logger.info("Take fee updated: %d -> %d bps", old, new_fee_bps)
        self._events.publish(FeeUpdated(market_id="", old_fee_bps=old, amount=new_fee_bps))
        return old
