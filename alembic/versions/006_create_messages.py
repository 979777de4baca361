"""006: create messages table

Revision ID: 006
Revises: 005
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE messages (
            id              VARCHAR(64)     PRIMARY KEY,
            user_id         UUID            NOT NULL REFERENCES users (id),
            option_id       VARCHAR(64)     NOT NULL REFERENCES pricing_options (id),
            text            TEXT            NOT NULL,
            email           VARCHAR(255)    NOT NULL,
            payment_method  VARCHAR(16)     NOT NULL,
            quick           BOOLEAN         NOT NULL DEFAULT FALSE,
            video           BOOLEAN         NOT NULL DEFAULT FALSE,
            cost            BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_messages_cost    CHECK (cost >= 0),
            CONSTRAINT ck_messages_payment CHECK (payment_method IN ('visa', 'mastercard', 'paypal'))
        );
    """)
    op.execute("CREATE INDEX idx_messages_user ON messages (user_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS messages CASCADE;")
