"""Shared test fixtures.

Every test gets its own Exchange (ledger, assets, markets, fee context) driven by a
FakeClock, so market time gates are deterministic and no state leaks between tests.
"""

from collections.abc import Awaitable, Callable
from dataclasses import replace

import pytest
from httpx import ASGITransport, AsyncClient

from src.exchange import Exchange, build_exchange
from src.main import create_app
from src.pm_account.infrastructure.collateral import InMemoryCollateralAsset
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol

START = 1_700_000_000
DAY = 86_400
USDC = "USDC"
SETTLER = "settler"
CREATOR = "creator"
# 10,000 native units of a 6-decimal asset == 10000 * 10**12 at 18 decimals
LIQUIDITY = 10_000

MarketFactory = Callable[..., Awaitable[Market]]


class FakeClock:
    """Deterministic unix-seconds clock for market time gates."""

    def __init__(self, now: int = START) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class InMemoryMarketRepository:
    """Dict-backed MarketRepositoryProtocol double.

    get() hands out copies; a record changes only when save() is called with it.
    """

    def __init__(self) -> None:
        self._markets: dict[str, Market] = {}
        self._order: list[str] = []

    async def get(self, market_id: str) -> Market | None:
        market = self._markets.get(market_id)
        return replace(market) if market is not None else None

    async def add(self, market: Market) -> None:
        if market.id in self._markets:
            raise KeyError(f"market already stored: {market.id}")
        self._markets[market.id] = replace(market)
        self._order.append(market.id)

    async def save(self, market: Market) -> None:
        if market.id not in self._markets:
            raise KeyError(f"unknown market: {market.id}")
        self._markets[market.id] = replace(market)

    async def list_markets(
        self, settled: bool | None, cursor_id: str | None, limit: int
    ) -> list[Market]:
        start = 0
        if cursor_id is not None and cursor_id in self._markets:
            start = self._order.index(cursor_id) + 1
        items: list[Market] = []
        for market_id in self._order[start:]:
            market = self._markets[market_id]
            if settled is not None and market.settled != settled:
                continue
            items.append(replace(market))
            if len(items) >= limit:
                break
        return items


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def market_repo() -> MarketRepositoryProtocol:
    return InMemoryMarketRepository()


@pytest.fixture
def exchange(clock: FakeClock, market_repo: MarketRepositoryProtocol) -> Exchange:
    return build_exchange(
        settler_id=SETTLER,
        market_repo=market_repo,
        fee_bps=0,
        collateral_assets={USDC: 6},
        clock=clock,
    )


@pytest.fixture
def usdc(exchange: Exchange) -> InMemoryCollateralAsset:
    return exchange.assets.resolve(USDC)


@pytest.fixture
def market_factory(exchange: Exchange, clock: FakeClock) -> MarketFactory:
    """Fund the creator with exactly `liquidity` and create a market ending in one day."""

    async def _create(
        creator: str = CREATOR,
        liquidity: int = LIQUIDITY,
        question: str = "Will it rain in Lisbon tomorrow?",
        end_time: int | None = None,
    ) -> Market:
        exchange.assets.resolve(USDC).mint(creator, liquidity)
        return await exchange.registry.create_market(
            creator, liquidity, USDC, question, end_time or clock.now + DAY
        )

    return _create


@pytest.fixture
async def market(market_factory: MarketFactory) -> Market:
    return await market_factory()


@pytest.fixture
async def client(exchange: Exchange) -> AsyncClient:
    """Async HTTP client bound to a fresh app around the `exchange` fixture."""
    transport = ASGITransport(app=create_app(exchange))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
