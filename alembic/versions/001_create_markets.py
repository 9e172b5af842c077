"""001: create markets table

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # NUMERIC(78, 0) holds any uint256: 18-decimal supplies, reserves and token ids
    op.execute("""
        CREATE TABLE markets (
            id                      VARCHAR(66)     PRIMARY KEY,
            seq                     BIGSERIAL       NOT NULL UNIQUE,
            creator                 TEXT            NOT NULL,
            question                TEXT            NOT NULL,
            collateral_asset        VARCHAR(128)    NOT NULL,
            collateral_decimals     SMALLINT        NOT NULL,
            end_time                BIGINT          NOT NULL,
            yes_token_id            NUMERIC(78, 0)  NOT NULL,
            no_token_id             NUMERIC(78, 0)  NOT NULL,
            reserve                 NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            yes_supply              NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            no_supply               NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            collateral_balance      NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            fees_accrued            NUMERIC(78, 0)  NOT NULL DEFAULT 0,
            created                 BOOLEAN         NOT NULL DEFAULT TRUE,
            settled                 BOOLEAN         NOT NULL DEFAULT FALSE,
            winning_outcome         VARCHAR(8)      NOT NULL DEFAULT 'UNSET',
            reserve_at_settlement   NUMERIC(78, 0),
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            settled_at              TIMESTAMPTZ,
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_markets_reserve_gte_0        CHECK (reserve >= 0),
            CONSTRAINT ck_markets_yes_supply_gte_0     CHECK (yes_supply >= 0),
            CONSTRAINT ck_markets_no_supply_gte_0      CHECK (no_supply >= 0),
            CONSTRAINT ck_markets_collateral_gte_0     CHECK (collateral_balance >= 0),
            CONSTRAINT ck_markets_fees_gte_0           CHECK (fees_accrued >= 0),
            CONSTRAINT ck_markets_decimals CHECK (
                collateral_decimals >= 0 AND collateral_decimals <= 36
            ),
            CONSTRAINT ck_markets_outcome CHECK (
                winning_outcome IN ('UNSET', 'YES', 'NO')
            ),
            CONSTRAINT ck_markets_settlement CHECK (
                settled = (winning_outcome <> 'UNSET')
            )
        );
    """)
    op.execute("CREATE INDEX idx_markets_settled ON markets (settled);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
