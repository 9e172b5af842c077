"""Mint against the curve: pricing, fee split, custody and rollback."""
from unittest.mock import AsyncMock

import pytest

from src.pm_account.infrastructure.collateral import EXCHANGE_VAULT_ID, InMemoryCollateralAsset
from src.pm_account.infrastructure.token_ledger import InMemoryTokenLedger
from src.pm_clearing.domain import curve
from src.pm_clearing.domain.mint_service import execute_mint, quote_mint
from src.pm_common.enums import Outcome
from src.pm_common.errors import CollateralTransferError, InvalidAmountError, InvalidSideError
from src.pm_market.domain.models import Market

L = 10_000 * 10**12
YES, NO = 11, 22


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


class TestQuoteMint:
    def test_fee_and_net(self) -> None:
        quote = quote_mint(_make_market(), YES, 1_000, fee_bps=100)
        assert quote.fee == 10
        assert quote.net_collateral == 990 * 10**12
        assert quote.minted == curve.mint_for(Outcome.YES, L, L, 990 * 10**12)
        assert quote.outcome is Outcome.YES
        assert quote.state_after.yes_supply == L + quote.minted
        assert quote.state_after.no_supply == L

    def test_no_side(self) -> None:
        quote = quote_mint(_make_market(), NO, 1_000, fee_bps=0)
        assert quote.outcome is Outcome.NO
        assert quote.state_after.yes_supply == L

    @pytest.mark.parametrize("amount", [0, -1])
    def test_non_positive_collateral(self, amount: int) -> None:
        with pytest.raises(InvalidAmountError) as exc_info:
            quote_mint(_make_market(), YES, amount, fee_bps=0)
        assert exc_info.value.code == 4001

    def test_foreign_token(self) -> None:
        with pytest.raises(InvalidSideError):
            quote_mint(_make_market(), 33, 1_000, fee_bps=0)

    def test_fee_rounds_down_to_zero_for_small_mints(self) -> None:
        quote = quote_mint(_make_market(), YES, 50, fee_bps=100)
        assert quote.fee == 0
        assert quote.net_collateral == 50 * 10**12
        assert quote.minted > 0

    def test_fractional_fee_is_truncated(self) -> None:
        # 1_999 * 100 / 10000 = 19.99
        quote = quote_mint(_make_market(), YES, 1_999, fee_bps=100)
        assert quote.fee == 19
        assert quote.net_collateral == 1_980 * 10**12


class TestExecuteMint:
    async def test_success(self) -> None:
        market = _make_market()
        ledger = InMemoryTokenLedger()
        asset = InMemoryCollateralAsset("USDC", 6)
        asset.mint("alice", 1_000)

        updated, quote = await execute_mint(market, "alice", YES, 1_000, 100, ledger, asset)

        assert await ledger.balance_of("alice", YES) == quote.minted
        assert await asset.balance_of("alice") == 0
        assert await asset.balance_of(EXCHANGE_VAULT_ID) == 1_000
        assert updated.collateral_balance == 10_990
        assert updated.fees_accrued == 10
        assert updated.yes_supply == L + quote.minted
        assert updated.reserve == quote.state_after.reserve
        # input record is untouched
        assert market.yes_supply == L

    async def test_unfunded_holder_changes_nothing(self) -> None:
        ledger = AsyncMock()
        asset = InMemoryCollateralAsset("USDC", 6)
        with pytest.raises(CollateralTransferError):
            await execute_mint(_make_market(), "alice", YES, 1_000, 0, ledger, asset)
        ledger.credit.assert_not_awaited()

    async def test_credit_failure_refunds(self) -> None:
        ledger = AsyncMock()
        ledger.credit.side_effect = RuntimeError("ledger down")
        asset = InMemoryCollateralAsset("USDC", 6)
        asset.mint("alice", 1_000)

        with pytest.raises(RuntimeError):
            await execute_mint(_make_market(), "alice", YES, 1_000, 0, ledger, asset)

        assert await asset.balance_of("alice") == 1_000
        assert await asset.balance_of(EXCHANGE_VAULT_ID) == 0

    async def test_commit_receives_updated_record(self) -> None:
        ledger = InMemoryTokenLedger()
        asset = InMemoryCollateralAsset("USDC", 6)
        asset.mint("alice", 1_000)
        commit = AsyncMock()

        updated, _ = await execute_mint(
            _make_market(), "alice", YES, 1_000, 0, ledger, asset, commit=commit
        )

        commit.assert_awaited_once_with(updated)

    async def test_commit_failure_undoes_mint(self) -> None:
        ledger = InMemoryTokenLedger()
        asset = InMemoryCollateralAsset("USDC", 6)
        asset.mint("alice", 1_000)
        commit = AsyncMock(side_effect=RuntimeError("store down"))

        with pytest.raises(RuntimeError):
            await execute_mint(_make_market(), "alice", YES, 1_000, 0, ledger, asset, commit=commit)

        assert await ledger.balance_of("alice", YES) == 0
        assert await ledger.total_supply(YES) == 0
        assert await asset.balance_of("alice") == 1_000
        assert await asset.balance_of(EXCHANGE_VAULT_ID) == 0
