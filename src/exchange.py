"""Composition root: wires one exchange deployment.

Ledger, collateral assets, locks and fee context live on the Exchange instance,
never in module globals; market records go through the injected repository.
"""

import logging
from dataclasses import dataclass

from config.settings import Settings
from src.pm_account.application.service import AccountService
from src.pm_account.infrastructure.collateral import CollateralAssetRegistry, InMemoryCollateralAsset
from src.pm_account.infrastructure.token_ledger import InMemoryTokenLedger
from src.pm_admin.application.service import AdminService
from src.pm_common.context import ExchangeContext
from src.pm_common.database import async_session_factory
from src.pm_common.datetime_utils import Clock, unix_now
from src.pm_common.events import EventBus
from src.pm_market.application.service import MarketRegistry
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_settlement.application.engine import SettlementEngine
from src.pm_trading.application.engine import TradingEngine

logger = logging.getLogger(__name__)


@dataclass
class Exchange:
    context: ExchangeContext
    ledger: InMemoryTokenLedger
    assets: CollateralAssetRegistry
    events: EventBus
    registry: MarketRegistry
    trading: TradingEngine
    settlement: SettlementEngine
    accounts: AccountService
    admin: AdminService


def build_exchange(
    settler_id: str,
    market_repo: MarketRepositoryProtocol,
    fee_bps: int = 0,
    collateral_assets: dict[str, int] | None = None,
    clock: Clock = unix_now,
    verify_invariants: bool = True,
) -> Exchange:
    context = ExchangeContext(settler_id=settler_id, fee_bps=fee_bps)
    ledger = InMemoryTokenLedger()
    assets = CollateralAssetRegistry()
    for address, decimals in (collateral_assets or {}).items():
        assets.register(InMemoryCollateralAsset(address, decimals))
    events = EventBus()
    registry = MarketRegistry(ledger, assets, events, market_repo, clock=clock)
    exchange = Exchange(
        context=context,
        ledger=ledger,
        assets=assets,
        events=events,
        registry=registry,
        trading=TradingEngine(registry, ledger, assets, events, context, verify_invariants),
        settlement=SettlementEngine(registry, ledger, assets, events, context, verify_invariants),
        accounts=AccountService(registry, ledger, assets),
        admin=AdminService(registry, ledger, assets, events, context),
    )
    logger.info(
        "Exchange built: settler=%s fee=%d bps assets=%s",
        settler_id, fee_bps, assets.addresses(),
    )
    return exchange


def build_exchange_from_settings(settings: Settings, clock: Clock = unix_now) -> Exchange:
    """Production wiring: market records live in Postgres (see alembic/versions)."""
    return build_exchange(
        settler_id=settings.SETTLER_ID,
        market_repo=MarketRepository(async_session_factory),
        fee_bps=settings.TAKE_FEE_BPS,
        collateral_assets=settings.COLLATERAL_ASSETS,
        clock=clock,
        verify_invariants=settings.VERIFY_INVARIANTS,
    )
