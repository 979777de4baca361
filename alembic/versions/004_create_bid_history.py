"""004: create bid_history table

Revision ID: 004
Revises: 003
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bid_history (
            id              VARCHAR(64)     PRIMARY KEY,
            lot_id          VARCHAR(64)     NOT NULL REFERENCES lots (id) ON DELETE CASCADE,
            bidder_id       UUID            NOT NULL REFERENCES users (id),
            amount          BIGINT          NOT NULL,
            payment_type    VARCHAR(16)     NOT NULL,
            submitted_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bid_history_amount  CHECK (amount >= 0),
            CONSTRAINT ck_bid_history_payment CHECK (payment_type IN ('PAYPAL', 'CARD'))
        );
    """)
    op.execute("CREATE INDEX idx_bid_history_lot_time ON bid_history (lot_id, submitted_at DESC);")
    op.execute("CREATE INDEX idx_bid_history_lot_amount ON bid_history (lot_id, amount DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bid_history CASCADE;")
