"""Domain models for pm_market: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.pm_common.enums import MarketPhase, Outcome


@dataclass
class Market:
    id: str
    creator: str
    question: str
    collateral_asset: str
    collateral_decimals: int
    end_time: int                   # unix seconds
    yes_token_id: int
    no_token_id: int
    reserve: int                    # 18-decimal, == isqrt(yes^2 + no^2) while trading
    yes_supply: int                 # 18-decimal
    no_supply: int                  # 18-decimal
    collateral_balance: int         # native units held for this market, fees excluded
    fees_accrued: int = 0           # native units
    created: bool = True
    settled: bool = False
    winning_outcome: Outcome = Outcome.UNSET
    reserve_at_settlement: int | None = None
    created_at: datetime | None = None
    settled_at: datetime | None = None

    def outcome_of(self, token_id: int) -> Outcome | None:
        if token_id == self.yes_token_id:
            return Outcome.YES
        if token_id == self.no_token_id:
            return Outcome.NO
        return None

    def token_of(self, outcome: Outcome) -> int:
        return self.yes_token_id if outcome is Outcome.YES else self.no_token_id

    def supply_of(self, outcome: Outcome) -> int:
        return self.yes_supply if outcome is Outcome.YES else self.no_supply

    @property
    def winning_token_id(self) -> int | None:
        if not self.settled or self.winning_outcome is Outcome.UNSET:
            return None
        return self.token_of(self.winning_outcome)

    def phase(self, now: int) -> MarketPhase:
        if self.settled:
            return MarketPhase.SETTLED
        if now >= self.end_time:
            return MarketPhase.CLOSED
        return MarketPhase.OPEN

    def is_trading_open(self, now: int) -> bool:
        return self.phase(now) is MarketPhase.OPEN
