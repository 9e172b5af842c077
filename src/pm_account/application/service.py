"""AccountService: holder views over the token ledger and collateral assets, plus token transfers."""

import logging

from src.pm_account.application.schemas import PositionResponse
from src.pm_account.domain.models import Position
from src.pm_account.domain.repository import OutcomeTokenLedgerProtocol
from src.pm_account.infrastructure.collateral import CollateralAssetRegistry
from src.pm_common.errors import InvalidAmountError, InvalidSideError
from src.pm_market.application.service import MarketRegistry

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(
        self,
        registry: MarketRegistry,
        ledger: OutcomeTokenLedgerProtocol,
        assets: CollateralAssetRegistry,
    ) -> None:
        self._registry = registry
        self._ledger = ledger
        self._assets = assets

    async def get_position(self, holder: str, market_id: str) -> Position:
        market = await self._registry.get_market(market_id)
        asset = self._assets.resolve(market.collateral_asset)
        return Position(
            holder=holder,
            market_id=market.id,
            yes_token_id=market.yes_token_id,
            no_token_id=market.no_token_id,
            yes_balance=await self._ledger.balance_of(holder, market.yes_token_id),
            no_balance=await self._ledger.balance_of(holder, market.no_token_id),
            collateral_balance=await asset.balance_of(holder),
        )

    async def get_position_view(self, holder: str, market_id: str) -> PositionResponse:
        return PositionResponse.from_domain(await self.get_position(holder, market_id))

    async def transfer_tokens(
        self, src: str, dst: str, market_id: str, token_id: int, amount: int
    ) -> Position:
        """Move outcome tokens between holders; returns the sender's position afterwards.

        Supplies, reserve and collateral of the market are untouched.
        """
        if amount <= 0:
            raise InvalidAmountError(f"transfer amount must be positive, got {amount}")
        market = await self._registry.get_market(market_id)
        if market.outcome_of(token_id) is None:
            raise InvalidSideError(token_id, market.id)
        await self._ledger.transfer(src, dst, token_id, amount)
        logger.info(
            "Token transfer: market=%s token=%d %s -> %s amount=%d",
            market.id, token_id, src, dst, amount,
        )
        return await self.get_position(src, market.id)
