"""Settlement finality and pro-rata redemption."""
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from src.pm_account.infrastructure.collateral import EXCHANGE_VAULT_ID, InMemoryCollateralAsset
from src.pm_account.infrastructure.token_ledger import InMemoryTokenLedger
from src.pm_clearing.domain import curve
from src.pm_clearing.domain.settlement import execute_redemption, quote_redemption, settle_market
from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    AlreadySettledError,
    CollateralTransferError,
    InvalidSideError,
    MarketNotSettledError,
    MarketStillOpenError,
    NoWinningTokensError,
)
from src.pm_market.domain.models import Market

L = 10_000 * 10**12
R = 14142135623730950
YES, NO = 11, 22
NOW = datetime.now(UTC)


def _make_market(**kwargs) -> Market:
    state = curve.seed(L)
    defaults = dict(
        id="0xm", creator="creator", question="q", collateral_asset="USDC",
        collateral_decimals=6, end_time=1_000, yes_token_id=YES, no_token_id=NO,
        reserve=state.reserve, yes_supply=state.yes_supply, no_supply=state.no_supply,
        collateral_balance=10_000,
    )
    defaults.update(kwargs)
    return Market(**defaults)


def _settled(outcome_token: int = YES, **kwargs) -> Market:
    return settle_market(_make_market(**kwargs), outcome_token, now=1_000, settled_at=NOW)


class TestSettleMarket:
    def test_settle_at_end_time(self) -> None:
        market = _settled(YES)
        assert market.settled is True
        assert market.winning_outcome is Outcome.YES
        assert market.winning_token_id == YES
        assert market.reserve_at_settlement == R
        assert market.settled_at == NOW

    def test_before_end_time(self) -> None:
        with pytest.raises(MarketStillOpenError) as exc_info:
            settle_market(_make_market(), YES, now=999, settled_at=NOW)
        assert exc_info.value.code == 3005

    def test_twice(self) -> None:
        with pytest.raises(AlreadySettledError) as exc_info:
            settle_market(_settled(NO), YES, now=2_000, settled_at=NOW)
        assert exc_info.value.code == 3006

    def test_foreign_token(self) -> None:
        with pytest.raises(InvalidSideError):
            settle_market(_make_market(), 33, now=1_000, settled_at=NOW)

    def test_moves_no_supply(self) -> None:
        market = _settled(NO)
        assert (market.yes_supply, market.no_supply, market.reserve) == (L, L, R)


class TestQuoteRedemption:
    def test_collateral_bounds_payout(self) -> None:
        quote = quote_redemption(_settled(YES), "creator", L, L)
        assert quote.reserve_share == R
        assert quote.payout_internal == L
        assert quote.payout == 10_000

    def test_half_of_supply(self) -> None:
        quote = quote_redemption(_settled(YES), "creator", L // 2, L)
        assert quote.reserve_share == R // 2
        assert quote.payout == 5_000

    def test_reserve_bounds_payout(self) -> None:
        quote = quote_redemption(_settled(YES, collateral_balance=20_000), "creator", L, L)
        assert quote.payout_internal == R
        assert quote.payout == 14_142

    def test_unsettled(self) -> None:
        with pytest.raises(MarketNotSettledError):
            quote_redemption(_make_market(), "creator", L, L)

    def test_empty_balance(self) -> None:
        with pytest.raises(NoWinningTokensError):
            quote_redemption(_settled(YES), "bob", 0, L)


class TestExecuteRedemption:
    async def _setup(self) -> tuple[InMemoryTokenLedger, InMemoryCollateralAsset]:
        ledger = InMemoryTokenLedger()
        await ledger.credit("creator", YES, L)
        await ledger.credit("creator", NO, L)
        asset = InMemoryCollateralAsset("USDC", 6)
        asset.mint(EXCHANGE_VAULT_ID, 10_000)
        return ledger, asset

    async def test_sole_winner_drains_market(self) -> None:
        ledger, asset = await self._setup()
        updated, quote = await execute_redemption(_settled(YES), "creator", ledger, asset)

        assert quote.burned == L
        assert quote.payout == 10_000
        assert await asset.balance_of("creator") == 10_000
        assert updated.reserve == 0
        assert updated.yes_supply == 0
        assert updated.collateral_balance == 0
        # losing side is left alone
        assert updated.no_supply == L
        assert await ledger.balance_of("creator", NO) == L

    async def test_not_settled(self) -> None:
        ledger, asset = await self._setup()
        with pytest.raises(MarketNotSettledError) as exc_info:
            await execute_redemption(_make_market(), "creator", ledger, asset)
        assert exc_info.value.code == 3007

    async def test_losing_side_only(self) -> None:
        ledger, asset = await self._setup()
        await ledger.transfer("creator", "bob", NO, L // 2)
        with pytest.raises(NoWinningTokensError) as exc_info:
            await execute_redemption(_settled(YES), "bob", ledger, asset)
        assert exc_info.value.code == 5001

    async def test_empty_holder(self) -> None:
        ledger, asset = await self._setup()
        with pytest.raises(NoWinningTokensError):
            await execute_redemption(_settled(NO), "nobody", ledger, asset)

    async def test_payout_failure_restores_winning_tokens(self) -> None:
        ledger, _ = await self._setup()
        asset = AsyncMock()
        asset.transfer_out.side_effect = CollateralTransferError("custody offline")
        commit = AsyncMock()
        market = _settled(YES)

        with pytest.raises(CollateralTransferError):
            await execute_redemption(market, "creator", ledger, asset, commit=commit)

        assert await ledger.balance_of("creator", YES) == L
        assert commit.await_count == 2
        assert commit.await_args_list[-1].args == (market,)

    async def test_commit_failure_moves_nothing(self) -> None:
        ledger, asset = await self._setup()
        commit = AsyncMock(side_effect=RuntimeError("store down"))

        with pytest.raises(RuntimeError):
            await execute_redemption(_settled(YES), "creator", ledger, asset, commit=commit)

        assert await ledger.balance_of("creator", YES) == L
        assert await asset.balance_of("creator") == 0
        assert await asset.balance_of(EXCHANGE_VAULT_ID) == 10_000
