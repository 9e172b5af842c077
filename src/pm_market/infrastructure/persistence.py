"""MarketRepository: concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
Supplies, reserves, token ids and collateral amounts are NUMERIC(78, 0) (any uint256);
asyncpg hands them back as Decimal, so the row mapper converts to int.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.pm_common.enums import Outcome
from src.pm_market.domain.models import Market

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, creator, question, collateral_asset, collateral_decimals, end_time,
    yes_token_id, no_token_id,
    reserve, yes_supply, no_supply, collateral_balance, fees_accrued,
    created, settled, winning_outcome, reserve_at_settlement,
    created_at, settled_at
"""

_GET_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

_INSERT_MARKET_SQL = text("""
    INSERT INTO markets (
        id, creator, question, collateral_asset, collateral_decimals, end_time,
        yes_token_id, no_token_id,
        reserve, yes_supply, no_supply, collateral_balance, fees_accrued,
        created, settled, winning_outcome, reserve_at_settlement,
        created_at, settled_at
    ) VALUES (
        :id, :creator, :question, :collateral_asset, :collateral_decimals, :end_time,
        :yes_token_id, :no_token_id,
        :reserve, :yes_supply, :no_supply, :collateral_balance, :fees_accrued,
        :created, :settled, :winning_outcome, CAST(:reserve_at_settlement AS NUMERIC),
        COALESCE(CAST(:created_at AS TIMESTAMPTZ), NOW()), CAST(:settled_at AS TIMESTAMPTZ)
    )
""")

_UPDATE_MARKET_SQL = text("""
    UPDATE markets
    SET reserve               = :reserve,
        yes_supply            = :yes_supply,
        no_supply             = :no_supply,
        collateral_balance    = :collateral_balance,
        fees_accrued          = :fees_accrued,
        settled               = :settled,
        winning_outcome       = :winning_outcome,
        reserve_at_settlement = CAST(:reserve_at_settlement AS NUMERIC),
        settled_at            = CAST(:settled_at AS TIMESTAMPTZ),
        updated_at            = NOW()
    WHERE id = :id
""")

# Creation order; the cursor is the id of the last market on the previous page
_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE
        (CAST(:settled AS BOOLEAN) IS NULL OR settled = CAST(:settled AS BOOLEAN))
        AND (
            CAST(:cursor_id AS TEXT) IS NULL
            OR seq > COALESCE(
                (SELECT seq FROM markets WHERE id = CAST(:cursor_id AS TEXT)), 0
            )
        )
    ORDER BY seq
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: object) -> Market:
    reserve_at_settlement = row.reserve_at_settlement  # type: ignore[attr-defined]
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        creator=row.creator,  # type: ignore[attr-defined]
        question=row.question,  # type: ignore[attr-defined]
        collateral_asset=row.collateral_asset,  # type: ignore[attr-defined]
        collateral_decimals=row.collateral_decimals,  # type: ignore[attr-defined]
        end_time=row.end_time,  # type: ignore[attr-defined]
        yes_token_id=int(row.yes_token_id),  # type: ignore[attr-defined]
        no_token_id=int(row.no_token_id),  # type: ignore[attr-defined]
        reserve=int(row.reserve),  # type: ignore[attr-defined]
        yes_supply=int(row.yes_supply),  # type: ignore[attr-defined]
        no_supply=int(row.no_supply),  # type: ignore[attr-defined]
        collateral_balance=int(row.collateral_balance),  # type: ignore[attr-defined]
        fees_accrued=int(row.fees_accrued),  # type: ignore[attr-defined]
        created=row.created,  # type: ignore[attr-defined]
        settled=row.settled,  # type: ignore[attr-defined]
        winning_outcome=Outcome(row.winning_outcome),  # type: ignore[attr-defined]
        reserve_at_settlement=(
            int(reserve_at_settlement) if reserve_at_settlement is not None else None
        ),
        created_at=row.created_at,  # type: ignore[attr-defined]
        settled_at=row.settled_at,  # type: ignore[attr-defined]
    )


def _market_params(market: Market) -> dict[str, object]:
    return {
        "id": market.id,
        "creator": market.creator,
        "question": market.question,
        "collateral_asset": market.collateral_asset,
        "collateral_decimals": market.collateral_decimals,
        "end_time": market.end_time,
        "yes_token_id": Decimal(market.yes_token_id),
        "no_token_id": Decimal(market.no_token_id),
        "reserve": Decimal(market.reserve),
        "yes_supply": Decimal(market.yes_supply),
        "no_supply": Decimal(market.no_supply),
        "collateral_balance": Decimal(market.collateral_balance),
        "fees_accrued": Decimal(market.fees_accrued),
        "created": market.created,
        "settled": market.settled,
        "winning_outcome": market.winning_outcome.value,
        "reserve_at_settlement": (
            Decimal(market.reserve_at_settlement)
            if market.reserve_at_settlement is not None
            else None
        ),
        "created_at": market.created_at,
        "settled_at": market.settled_at,
    }


_UPDATE_COLUMNS = (
    "id", "reserve", "yes_supply", "no_supply", "collateral_balance", "fees_accrued",
    "settled", "winning_outcome", "reserve_at_settlement", "settled_at",
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    """One short-lived AsyncSession per call; writes commit before returning."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, market_id: str) -> Market | None:
        async with self._session_factory() as db:
            result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
            row = result.fetchone()
        return _row_to_market(row) if row else None

    async def add(self, market: Market) -> None:
        async with self._session_factory() as db:
            await db.execute(_INSERT_MARKET_SQL, _market_params(market))
            await db.commit()

    async def save(self, market: Market) -> None:
        async with self._session_factory() as db:
            params = _market_params(market)
            result = await db.execute(
                _UPDATE_MARKET_SQL, {key: params[key] for key in _UPDATE_COLUMNS}
            )
            if result.rowcount == 0:
                await db.rollback()
                raise KeyError(f"unknown market: {market.id}")
            await db.commit()

    async def list_markets(
        self,
        settled: bool | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Market]:
        async with self._session_factory() as db:
            result = await db.execute(
                _LIST_MARKETS_SQL,
                {"settled": settled, "cursor_id": cursor_id, "limit": limit},
            )
            rows = result.fetchall()
        return [_row_to_market(row) for row in rows]
