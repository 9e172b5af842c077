"""Per-market invariant checks (INV-1..4)."""
from src.pm_account.infrastructure.token_ledger import InMemoryTokenLedger
from src.pm_clearing.domain import curve
from src.pm_clearing.domain.invariants import check_market_invariants
from src.pm_common.enums import Outcome
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


async def _ledger(yes: int = L, no: int = L) -> InMemoryTokenLedger:
    ledger = InMemoryTokenLedger()
    await ledger.credit("creator", YES, yes)
    await ledger.credit("creator", NO, no)
    return ledger


class TestCheckMarketInvariants:
    async def test_consistent_market(self) -> None:
        assert await check_market_invariants(_make_market(), await _ledger()) == []

    async def test_supply_mismatch(self) -> None:
        violations = await check_market_invariants(_make_market(), await _ledger(yes=L + 1))
        assert len(violations) == 1
        assert violations[0].startswith("INV-1")

    async def test_curve_tolerance_of_one(self) -> None:
        market = _make_market()
        market.reserve += 1
        assert await check_market_invariants(market, await _ledger()) == []
        market.reserve += 1
        violations = await check_market_invariants(market, await _ledger())
        assert violations and violations[0].startswith("INV-2")

    async def test_curve_not_checked_after_settlement(self) -> None:
        market = _make_market(
            settled=True, winning_outcome=Outcome.YES, reserve_at_settlement=L * 2, reserve=5
        )
        assert await check_market_invariants(market, await _ledger()) == []

    async def test_reserve_above_settlement_snapshot(self) -> None:
        market = _make_market(
            settled=True, winning_outcome=Outcome.YES, reserve_at_settlement=10, reserve=11
        )
        violations = await check_market_invariants(market, await _ledger())
        assert violations == [
            "INV-3 violated (0xm): reserve=11 > reserve_at_settlement=10"
        ]

    async def test_negative_balance(self) -> None:
        market = _make_market(fees_accrued=-1)
        violations = await check_market_invariants(market, await _ledger())
        assert violations == ["INV-4 violated (0xm): fees_accrued=-1 < 0"]
