"""Pydantic schemas for settlement, redemption and fee withdrawal."""

from pydantic import BaseModel, Field

from src.pm_clearing.domain.settlement import RedemptionQuote


class SettleRequest(BaseModel):
    winning_token_id: int = Field(ge=0)


class RedemptionResult(BaseModel):
    market_id: str
    holder: str
    token_id: str
    outcome: str
    burned: int
    reserve_share: int
    payout: int

    @classmethod
    def from_quote(cls, q: RedemptionQuote) -> "RedemptionResult":
        return cls(
            market_id=q.market_id,
            holder=q.holder,
            token_id=str(q.token_id),
            outcome=q.outcome.value,
            burned=q.burned,
            reserve_share=q.reserve_share,
            payout=q.payout,
        )


class FeeWithdrawalResponse(BaseModel):
    market_id: str
    recipient: str
    amount: int
