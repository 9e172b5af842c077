"""MarketRegistry: creates markets and serves their records.

Owns one asyncio.Lock per created market; trading and settlement take the same lock,
so every mutation of a market's (reserve, yes_supply, no_supply) is serialized.
Locks exist only for markets that were created; creation itself runs under one
registry-wide lock.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from src.pm_account.domain.repository import OutcomeTokenLedgerProtocol
from src.pm_account.infrastructure.collateral import CollateralAssetRegistry
from src.pm_clearing.domain import curve
from src.pm_common.datetime_utils import Clock, unix_now, utc_now
from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    DuplicateMarketError,
    InvalidLiquidityError,
    InvalidMarketEndTimeError,
    InvalidQuestionError,
    InvalidSideError,
    MarketNotFoundError,
)
from src.pm_common.events import EventBus, MarketCreated
from src.pm_common.fixed_point import to_internal
from src.pm_common.id_generator import derive_market_id, derive_token_id
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol

logger = logging.getLogger(__name__)


class MarketRegistry:
    def __init__(
        self,
        ledger: OutcomeTokenLedgerProtocol,
        assets: CollateralAssetRegistry,
        events: EventBus,
        repo: MarketRepositoryProtocol,
        clock: Clock = unix_now,
    ) -> None:
        self._ledger = ledger
        self._assets = assets
        self._events = events
        self._repo = repo
        self._clock = clock
        self._market_locks: dict[str, asyncio.Lock] = {}
        self._create_lock = asyncio.Lock()

    async def lock_for(self, market_id: str) -> asyncio.Lock:
        """The market's lock. Raises MarketNotFoundError for ids never created."""
        if not await self.is_created(market_id):
            raise MarketNotFoundError(market_id)
        return self._market_locks.setdefault(market_id, asyncio.Lock())

    @asynccontextmanager
    async def locked_market(self, market_id: str) -> AsyncIterator[Market]:
        """Hold the market's lock and yield its current record."""
        async with await self.lock_for(market_id):
            yield await self.get_market(market_id)

    def now(self) -> int:
        return self._clock()

    @staticmethod
    def token_ids(market_id: str) -> tuple[int, int]:
        """(yes_token_id, no_token_id): pure derivation, valid for any id."""
        return derive_token_id(market_id, Outcome.YES), derive_token_id(market_id, Outcome.NO)

    async def create_market(
        self,
        creator: str,
        liquidity: int,
        collateral_asset: str | None,
        question: str,
        end_time: int,
    ) -> Market:
        now = self.now()
        if end_time <= now:
            raise InvalidMarketEndTimeError(end_time, now)
        if liquidity <= 0:
            raise InvalidLiquidityError(liquidity)
        try:
            question.encode("utf-8")
            creator.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidQuestionError("question and creator must be valid UTF-8") from exc
        asset = self._assets.resolve(collateral_asset)

        market_id = derive_market_id(creator, question, end_time)
        async with self._create_lock:
            existing = await self._repo.get(market_id)
            if existing is not None and existing.created:
                raise DuplicateMarketError(market_id)

            decimals = await asset.decimals()
            state = curve.seed(to_internal(liquidity, decimals))
            yes_token_id, no_token_id = self.token_ids(market_id)

            await asset.transfer_in(creator, liquidity)
            try:
                await self._ledger.credit(creator, yes_token_id, state.yes_supply)
                try:
                    await self._ledger.credit(creator, no_token_id, state.no_supply)
                except Exception:
                    await self._ledger.debit(creator, yes_token_id, state.yes_supply)
                    raise
            except Exception:
                logger.warning(
                    "Market seeding failed, refunding liquidity: market=%s creator=%s",
                    market_id, creator,
                )
                await asset.transfer_out(creator, liquidity)
                raise

            market = Market(
                id=market_id,
                creator=creator,
                question=question,
                collateral_asset=asset.address,
                collateral_decimals=decimals,
                end_time=end_time,
                yes_token_id=yes_token_id,
                no_token_id=no_token_id,
                reserve=state.reserve,
                yes_supply=state.yes_supply,
                no_supply=state.no_supply,
                collateral_balance=liquidity,
                created=True,
                created_at=utc_now(),
            )
            await self._repo.add(market)

        logger.info(
            "Market created: id=%s creator=%s liquidity=%d reserve=%d end=%d",
            market_id, creator, liquidity, state.reserve, end_time,
        )
        self._events.publish(
            MarketCreated(
                market_id=market_id,
                creator=creator,
                question=question,
                end_time=end_time,
                collateral_asset=asset.address,
                liquidity=liquidity,
                seeded_supply=state.yes_supply,
                reserve=state.reserve,
                yes_token_id=yes_token_id,
                no_token_id=no_token_id,
            )
        )
        return market

    async def save(self, market: Market) -> None:
        await self._repo.save(market)

    # --- Read accessors ---

    async def get_market(self, market_id: str) -> Market:
        market = await self._repo.get(market_id)
        if market is None or not market.created:
            raise MarketNotFoundError(market_id)
        return market

    async def list_markets(
        self, settled: bool | None = None, cursor_id: str | None = None, limit: int = 20
    ) -> list[Market]:
        return await self._repo.list_markets(settled, cursor_id, limit)

    async def is_created(self, market_id: str) -> bool:
        market = await self._repo.get(market_id)
        return market is not None and market.created

    async def question_of(self, market_id: str) -> str:
        return (await self.get_market(market_id)).question

    async def end_time_of(self, market_id: str) -> int:
        return (await self.get_market(market_id)).end_time

    async def collateral_asset_of(self, market_id: str) -> str:
        return (await self.get_market(market_id)).collateral_asset

    async def reserve_of(self, market_id: str) -> int:
        return (await self.get_market(market_id)).reserve

    async def is_settled(self, market_id: str) -> bool:
        return (await self.get_market(market_id)).settled

    async def winning_side(self, market_id: str) -> int | None:
        return (await self.get_market(market_id)).winning_token_id

    async def price_of(self, market_id: str, token_id: int) -> int:
        market = await self.get_market(market_id)
        outcome = self.outcome_for_token(market, token_id)
        return curve.price_of(outcome, market.yes_supply, market.no_supply)

    @staticmethod
    def outcome_for_token(market: Market, token_id: int) -> Outcome:
        outcome = market.outcome_of(token_id)
        if outcome is None:
            raise InvalidSideError(token_id, market.id)
        return outcome
