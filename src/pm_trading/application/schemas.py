"""Pydantic schemas for mint / burn requests and their realized quotes."""

from pydantic import BaseModel, Field

from src.pm_clearing.domain.burn_service import BurnQuote
from src.pm_clearing.domain.mint_service import MintQuote
from src.pm_common.fixed_point import wad_to_display


class MintRequest(BaseModel):
    token_id: int = Field(ge=0)
    collateral_in: int = Field(description="Native collateral units, fee included")


class BurnRequest(BaseModel):
    token_id: int = Field(ge=0)
    token_amount: int = Field(description="18-decimal outcome token units")


class MintResult(BaseModel):
    market_id: str
    token_id: str
    outcome: str
    collateral_in: int
    fee: int
    net_collateral: int
    minted: int
    minted_display: str
    reserve_after: int

    @classmethod
    def from_quote(cls, q: MintQuote) -> "MintResult":
        return cls(
            market_id=q.market_id,
            token_id=str(q.token_id),
            outcome=q.outcome.value,
            collateral_in=q.collateral_in,
            fee=q.fee,
            net_collateral=q.net_collateral,
            minted=q.minted,
            minted_display=wad_to_display(q.minted),
            reserve_after=q.state_after.reserve,
        )


class BurnResult(BaseModel):
    market_id: str
    token_id: str
    outcome: str
    burned: int
    gross_collateral: int
    fee: int
    payout: int
    reserve_after: int

    @classmethod
    def from_quote(cls, q: BurnQuote) -> "BurnResult":
        return cls(
            market_id=q.market_id,
            token_id=str(q.token_id),
            outcome=q.outcome.value,
            burned=q.burned,
            gross_collateral=q.gross_native,
            fee=q.fee,
            payout=q.payout,
            reserve_after=q.state_after.reserve,
        )


class FeeUpdateRequest(BaseModel):
    fee_bps: int


class FeeUpdateResponse(BaseModel):
    old_fee_bps: int
    fee_bps: int
