import pytest

from src.pm_account.infrastructure.token_ledger import InMemoryTokenLedger
from src.pm_common.errors import InsufficientBalanceError, InvalidAmountError

TOKEN = 2**255 + 17


class TestInMemoryTokenLedger:
    async def test_credit_and_supply(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.credit("alice", TOKEN, 100)
        await ledger.credit("bob", TOKEN, 50)
        assert await ledger.balance_of("alice", TOKEN) == 100
        assert await ledger.total_supply(TOKEN) == 150

    async def test_debit(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.credit("alice", TOKEN, 100)
        await ledger.debit("alice", TOKEN, 30)
        assert await ledger.balance_of("alice", TOKEN) == 70
        assert await ledger.total_supply(TOKEN) == 70

    async def test_debit_more_than_balance(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.credit("alice", TOKEN, 10)
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await ledger.debit("alice", TOKEN, 11)
        assert exc_info.value.code == 2001
        assert await ledger.balance_of("alice", TOKEN) == 10

    async def test_negative_amounts_rejected(self) -> None:
        ledger = InMemoryTokenLedger()
        with pytest.raises(InvalidAmountError):
            await ledger.credit("alice", TOKEN, -1)
        with pytest.raises(InvalidAmountError):
            await ledger.debit("alice", TOKEN, -1)

    async def test_transfer_keeps_supply(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.credit("alice", TOKEN, 100)
        await ledger.transfer("alice", "bob", TOKEN, 40)
        assert await ledger.balance_of("alice", TOKEN) == 60
        assert await ledger.balance_of("bob", TOKEN) == 40
        assert await ledger.total_supply(TOKEN) == 100

    async def test_transfer_insufficient(self) -> None:
        ledger = InMemoryTokenLedger()
        with pytest.raises(InsufficientBalanceError):
            await ledger.transfer("alice", "bob", TOKEN, 1)

    async def test_journal(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.credit("alice", TOKEN, 5)
        await ledger.debit("alice", TOKEN, 2)
        first, second = ledger.transfers
        assert (first.holder_from, first.holder_to, first.amount) == (None, "alice", 5)
        assert (second.holder_from, second.holder_to, second.amount) == ("alice", None, 2)
        assert second.sequence == 2

    async def test_negative_transfer_rejected(self) -> None:
        ledger = InMemoryTokenLedger()
        await ledger.credit("alice", TOKEN, 5)
        with pytest.raises(InvalidAmountError):
            await ledger.transfer("alice", "bob", TOKEN, -1)
        assert await ledger.balance_of("alice", TOKEN) == 5
