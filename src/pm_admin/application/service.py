# src/pm_admin/application/service.py
"""Admin application service: invariant audits and per-market stats."""
from typing import Any

from src.pm_account.domain.repository import OutcomeTokenLedgerProtocol
from src.pm_account.infrastructure.collateral import CollateralAssetRegistry, InMemoryCollateralAsset
from src.pm_clearing.domain.global_invariants import verify_custody_invariants
from src.pm_clearing.domain.invariants import check_market_invariants
from src.pm_common.context import ExchangeContext
from src.pm_common.errors import AppError, NotSettlerError
from src.pm_common.events import EventBus, TokensBurned, TokensMinted
from src.pm_market.application.service import MarketRegistry
from src.pm_market.domain.models import Market

_PAGE = 100


class AdminService:
    def __init__(
        self,
        registry: MarketRegistry,
        ledger: OutcomeTokenLedgerProtocol,
        assets: CollateralAssetRegistry,
        events: EventBus,
        context: ExchangeContext,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._assets = assets
        self._events = events
        self._context = context

    async def _all_markets(self) -> list[Market]:
        markets: list[Market] = []
        cursor: str | None = None
        while True:
            page = await self._registry.list_markets(cursor_id=cursor, limit=_PAGE)
            markets.extend(page)
            if len(page) < _PAGE:
                return markets
            cursor = page[-1].id

    async def verify_all_invariants(self) -> dict[str, object]:
        """Run per-market (INV-1..4) and global custody (INV-G) checks."""
        violations: list[str] = []
        markets = await self._all_markets()
        for market in markets:
            violations.extend(await check_market_invariants(market, self._ledger))
        violations.extend(await verify_custody_invariants(markets, self._assets))
        return {"ok": len(violations) == 0, "markets": len(markets), "violations": violations}

    async def get_market_stats(self, market_id: str) -> dict[str, Any]:
        market = await self._registry.get_market(market_id)
        events = self._events.events_for(market_id)
        mints = [e for e in events if isinstance(e, TokensMinted)]
        burns = [e for e in events if isinstance(e, TokensBurned)]
        traders = {e.holder for e in mints} | {e.holder for e in burns}
        return {
            "market_id": market_id,
            "settled": market.settled,
            "total_mints": len(mints),
            "total_burns": len(burns),
            "collateral_in": sum(e.collateral_in for e in mints),
            "collateral_out": sum(e.amount for e in burns),
            "fees_accrued": market.fees_accrued,
            "unique_traders": len(traders),
        }

    async def fund(self, caller: str, address: str, holder: str, amount: int) -> int:
        """Settler-only faucet for in-memory collateral assets. Returns the new balance."""
        if not self._context.is_settler(caller):
            raise NotSettlerError(caller)
        asset = self._assets.resolve(address)
        if not isinstance(asset, InMemoryCollateralAsset):
            raise AppError(6003, f"Asset {address} cannot be funded", http_status=422)
        asset.mint(holder, amount)
        return await asset.balance_of(holder)
