"""In-memory outcome-token ledger.

Balances keyed by (holder, token_id); total supply tracked per token_id so that
total_supply(token) always equals the sum of holder balances. Every credit/debit
is journaled as a TokenTransfer.
"""

import logging
from collections import defaultdict

from src.pm_account.domain.models import TokenTransfer
from src.pm_common.datetime_utils import utc_now
from src.pm_common.errors import InsufficientBalanceError, InvalidAmountError

logger = logging.getLogger(__name__)


class InMemoryTokenLedger:
    def __init__(self) -> None:
        self._balances: dict[tuple[str, int], int] = defaultdict(int)
        self._supply: dict[int, int] = defaultdict(int)
        self._transfers: list[TokenTransfer] = []

    def _journal(self, token_id: int, src: str | None, dst: str | None, amount: int) -> None:
        self._transfers.append(
            TokenTransfer(
                sequence=len(self._transfers) + 1,
                token_id=token_id,
                holder_from=src,
                holder_to=dst,
                amount=amount,
                created_at=utc_now(),
            )
        )

    async def credit(self, holder: str, token_id: int, amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError(f"negative credit {amount}")
        self._balances[(holder, token_id)] += amount
        self._supply[token_id] += amount
        self._journal(token_id, None, holder, amount)

    async def debit(self, holder: str, token_id: int, amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError(f"negative debit {amount}")
        available = self._balances.get((holder, token_id), 0)
        if available < amount:
            raise InsufficientBalanceError(required=amount, available=available)
        self._balances[(holder, token_id)] = available - amount
        self._supply[token_id] -= amount
        self._journal(token_id, holder, None, amount)

    async def transfer(self, src: str, dst: str, token_id: int, amount: int) -> None:
        """Holder-to-holder move; supply is unchanged."""
        if amount < 0:
            raise InvalidAmountError(f"negative transfer {amount}")
        available = self._balances.get((src, token_id), 0)
        if available < amount:
            raise InsufficientBalanceError(required=amount, available=available)
        self._balances[(src, token_id)] = available - amount
        self._balances[(dst, token_id)] += amount
        self._journal(token_id, src, dst, amount)
        logger.debug("Token transfer: token=%d %s -> %s amount=%d", token_id, src, dst, amount)

    async def total_supply(self, token_id: int) -> int:
        return self._supply.get(token_id, 0)

    async def balance_of(self, holder: str, token_id: int) -> int:
        return self._balances.get((holder, token_id), 0)

    @property
    def transfers(self) -> list[TokenTransfer]:
        return list(self._transfers)
