# src/pm_market/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from src.pm_market.domain.models import Market

# Persists an updated market record; clearing steps undo their moves when it raises
MarketCommit = Callable[[Market], Awaitable[None]]


class MarketRepositoryProtocol(Protocol):
    async def get(self, market_id: str) -> Market | None: ...

    async def add(self, market: Market) -> None: ...

    async def save(self, market: Market) -> None: ...

    async def list_markets(
        self,
        settled: bool | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Market]: ...
