"""Exchange notifications and the in-process event bus.

Every committed lifecycle operation publishes one event carrying the market id and
the realized amounts, enough for an observer to rebuild market state without
re-deriving curve math. The bus keeps an append-only journal and fans events out
to asyncio.Queue subscribers.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import EventType, Outcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExchangeEvent:
    market_id: str

    @property
    def event_type(self) -> EventType:
        raise NotImplementedError

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["event_type"] = self.event_type.value
        return payload


@dataclass(frozen=True)
class MarketCreated(ExchangeEvent):
    creator: str
    question: str
    end_time: int
    collateral_asset: str
    liquidity: int              # native units pulled from the creator
    seeded_supply: int          # 18-decimal, per side
    reserve: int
    yes_token_id: int
    no_token_id: int

    @property
    def event_type(self) -> EventType:
        return EventType.MARKET_CREATED


@dataclass(frozen=True)
class TokensMinted(ExchangeEvent):
    holder: str
    token_id: int
    outcome: Outcome
    collateral_in: int          # native, fee included
    fee: int                    # native
    amount: int                 # 18-decimal tokens minted
    reserve: int

    @property
    def event_type(self) -> EventType:
        return EventType.TOKENS_MINTED


@dataclass(frozen=True)
class TokensBurned(ExchangeEvent):
    holder: str
    token_id: int
    outcome: Outcome
    burned: int                 # 18-decimal tokens burned
    fee: int                    # native
    amount: int                 # native collateral paid to the holder
    reserve: int

    @property
    def event_type(self) -> EventType:
        return EventType.TOKENS_BURNED


@dataclass(frozen=True)
class MarketSettled(ExchangeEvent):
    winning_token_id: int
    outcome: Outcome
    settler: str
    reserve: int

    @property
    def event_type(self) -> EventType:
        return EventType.MARKET_SETTLED


@dataclass(frozen=True)
class PositionRedeemed(ExchangeEvent):
    holder: str
    token_id: int
    burned: int                 # 18-decimal winning tokens burned
    amount: int                 # native collateral paid
    reserve: int

    @property
    def event_type(self) -> EventType:
        return EventType.POSITION_REDEEMED


@dataclass(frozen=True)
class FeeUpdated(ExchangeEvent):
    old_fee_bps: int
    amount: int                 # new fee in bps

    @property
    def event_type(self) -> EventType:
        return EventType.FEE_UPDATED


@dataclass(frozen=True)
class FeesWithdrawn(ExchangeEvent):
    recipient: str
    amount: int                 # native

    @property
    def event_type(self) -> EventType:
        return EventType.FEES_WITHDRAWN


@dataclass(frozen=True)
class JournalEntry:
    sequence: int
    event: ExchangeEvent
    recorded_at: datetime


@dataclass
class EventBus:
    _history: list[JournalEntry] = field(default_factory=list)
    _subscribers: list[asyncio.Queue[ExchangeEvent]] = field(default_factory=list)

    def publish(self, event: ExchangeEvent) -> JournalEntry:
        entry = JournalEntry(
            sequence=len(self._history) + 1, event=event, recorded_at=utc_now()
        )
        self._history.append(entry)
        for queue in self._subscribers:
            queue.put_nowait(event)
        logger.info(
            "Event %s #%d market=%s", event.event_type.value, entry.sequence, event.market_id
        )
        return entry

    def subscribe(self) -> asyncio.Queue[ExchangeEvent]:
        queue: asyncio.Queue[ExchangeEvent] = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[ExchangeEvent]) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    @property
    def history(self) -> list[JournalEntry]:
        return list(self._history)

    def events_for(self, market_id: str) -> list[ExchangeEvent]:
        return [e.event for e in self._history if e.event.market_id == market_id]
