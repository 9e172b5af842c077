"""Global enums."""

from enum import Enum


class Outcome(str, Enum):
    """Side of a binary market. UNSET is only meaningful as a settlement result."""

    UNSET = "UNSET"
    YES = "YES"
    NO = "NO"


class MarketPhase(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    SETTLED = "SETTLED"


class EventType(str, Enum):
    MARKET_CREATED = "MARKET_CREATED"
    TOKENS_MINTED = "TOKENS_MINTED"
    TOKENS_BURNED = "TOKENS_BURNED"
    MARKET_SETTLED = "MARKET_SETTLED"
    POSITION_REDEEMED = "POSITION_REDEEMED"
    FEE_UPDATED = "FEE_UPDATED"
    FEES_WITHDRAWN = "FEES_WITHDRAWN"
