"""Pydantic schemas for pm_market API requests and responses.

Token ids are unsigned 256-bit integers; responses render them as decimal
strings so JSON clients without big-int support keep full precision. Requests
accept either form (pydantic coerces numeric strings).
"""

from pydantic import BaseModel, Field

from src.pm_clearing.domain import curve
from src.pm_common.enums import Outcome
from src.pm_common.fixed_point import wad_to_display
from src.pm_market.domain.models import Market


class CreateMarketRequest(BaseModel):
    question: str = Field(min_length=1, max_length=1000)
    end_time: int = Field(description="Unix seconds; must lie in the future")
    liquidity: int = Field(description="Native collateral units seeded into the curve")
    collateral_asset: str | None = None


class MarketDetail(BaseModel):
    id: str
    creator: str
    question: str
    collateral_asset: str
    collateral_decimals: int
    end_time: int
    phase: str
    yes_token_id: str
    no_token_id: str
    reserve: int
    yes_supply: int
    no_supply: int
    yes_price: int
    yes_price_display: str
    no_price: int
    no_price_display: str
    collateral_balance: int
    fees_accrued: int
    settled: bool
    winning_outcome: str | None
    winning_token_id: str | None
    created_at: str | None
    settled_at: str | None

    @classmethod
    def from_domain(cls, m: Market, now: int) -> "MarketDetail":
        yes_price = curve.price_of(Outcome.YES, m.yes_supply, m.no_supply)
        no_price = curve.price_of(Outcome.NO, m.yes_supply, m.no_supply)
        winning = m.winning_token_id
        return cls(
            id=m.id,
            creator=m.creator,
            question=m.question,
            collateral_asset=m.collateral_asset,
            collateral_decimals=m.collateral_decimals,
            end_time=m.end_time,
            phase=m.phase(now).value,
            yes_token_id=str(m.yes_token_id),
            no_token_id=str(m.no_token_id),
            reserve=m.reserve,
            yes_supply=m.yes_supply,
            no_supply=m.no_supply,
            yes_price=yes_price,
            yes_price_display=wad_to_display(yes_price),
            no_price=no_price,
            no_price_display=wad_to_display(no_price),
            collateral_balance=m.collateral_balance,
            fees_accrued=m.fees_accrued,
            settled=m.settled,
            winning_outcome=m.winning_outcome.value if m.settled else None,
            winning_token_id=str(winning) if winning is not None else None,
            created_at=m.created_at.isoformat() if m.created_at else None,
            settled_at=m.settled_at.isoformat() if m.settled_at else None,
        )


class MarketListResponse(BaseModel):
    items: list[MarketDetail]
    next_cursor: str | None
    has_more: bool


class PriceResponse(BaseModel):
    market_id: str
    token_id: str
    outcome: str
    price: int
    price_display: str
