"""Protocols for the two external collaborators the exchange core consumes.

Unit tests inject mocks that conform to these Protocols.
Infrastructure layer provides the in-memory implementations.
"""

from typing import Protocol


class OutcomeTokenLedgerProtocol(Protocol):
    """Multi-token ledger of (holder, token_id) balances, 18-decimal amounts."""

    async def credit(self, holder: str, token_id: int, amount: int) -> None: ...

    async def debit(self, holder: str, token_id: int, amount: int) -> None:
        """Raises InsufficientBalanceError when holder's balance < amount."""
        ...

    async def transfer(self, src: str, dst: str, token_id: int, amount: int) -> None:
        """Holder-to-holder move that leaves total_supply unchanged."""
        ...

    async def total_supply(self, token_id: int) -> int: ...

    async def balance_of(self, holder: str, token_id: int) -> int: ...


class CollateralAssetProtocol(Protocol):
    """Fungible collateral token. All amounts are in the asset's native scale."""

    @property
    def address(self) -> str: ...

    async def transfer_in(self, holder: str, amount: int) -> None:
        """Move amount from holder into exchange custody; CollateralTransferError on failure."""
        ...

    async def transfer_out(self, holder: str, amount: int) -> None:
        """Move amount from exchange custody to holder; CollateralTransferError on failure."""
        ...

    async def decimals(self) -> int: ...

    async def balance_of(self, holder: str) -> int: ...
