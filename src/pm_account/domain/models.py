"""Domain models for pm_account: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TokenTransfer:
    """One movement on the outcome-token ledger.

    holder_from is None for a credit (mint), holder_to is None for a debit (burn).
    """

    sequence: int
    token_id: int
    holder_from: str | None
    holder_to: str | None
    amount: int                 # 18-decimal
    created_at: datetime


@dataclass(frozen=True)
class CollateralTransfer:
    sequence: int
    asset: str
    holder_from: str
    holder_to: str
    amount: int                 # native units
    created_at: datetime


@dataclass
class Position:
    """A holder's outcome-token balances in one market (read model)."""

    holder: str
    market_id: str
    yes_token_id: int
    no_token_id: int
    yes_balance: int = 0        # 18-decimal
    no_balance: int = 0         # 18-decimal
    collateral_balance: int = 0  # native units of the market's collateral asset
