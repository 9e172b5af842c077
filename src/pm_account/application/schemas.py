"""Pydantic schemas for pm_account API responses."""

from pydantic import BaseModel, Field

from src.pm_account.domain.models import Position
from src.pm_common.fixed_point import wad_to_display


class PositionResponse(BaseModel):
    holder: str
    market_id: str
    yes_token_id: str
    no_token_id: str
    yes_balance: int
    yes_balance_display: str
    no_balance: int
    no_balance_display: str
    collateral_balance: int

    @classmethod
    def from_domain(cls, p: Position) -> "PositionResponse":
        return cls(
            holder=p.holder,
            market_id=p.market_id,
            # token ids are 256-bit; rendered as decimal strings for JSON clients
            yes_token_id=str(p.yes_token_id),
            no_token_id=str(p.no_token_id),
            yes_balance=p.yes_balance,
            yes_balance_display=wad_to_display(p.yes_balance),
            no_balance=p.no_balance,
            no_balance_display=wad_to_display(p.no_balance),
            collateral_balance=p.collateral_balance,
        )


class FundRequest(BaseModel):
    holder: str = Field(min_length=1)
    amount: int = Field(gt=0, description="Native collateral units to credit")


class FundResponse(BaseModel):
    asset: str
    holder: str
    amount: int
    balance: int


class TokenTransferRequest(BaseModel):
    to: str = Field(min_length=1)
    token_id: int = Field(ge=0)
    amount: int = Field(description="18-decimal outcome token units")
