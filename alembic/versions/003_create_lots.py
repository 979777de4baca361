"""003: create lots table

Revision ID: 003
Revises: 002
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE lots (
            id              VARCHAR(64)     PRIMARY KEY,
            name            VARCHAR(200)    NOT NULL,
            description     TEXT,
            current_bid     BIGINT          NOT NULL DEFAULT 0,
            min_raise       BIGINT          NOT NULL,
            closes_at       TIMESTAMPTZ     NOT NULL,
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            image_url       VARCHAR(500),
            sort_order      INT             NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_lots_current_bid CHECK (current_bid >= 0),
            CONSTRAINT ck_lots_min_raise   CHECK (min_raise > 0)
        );
    """)
    op.execute("CREATE INDEX idx_lots_sort ON lots (sort_order, id);")
    op.execute("""
        CREATE TRIGGER trg_lots_updated_at
            BEFORE UPDATE ON lots
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TRIGGER trg_lots_guard_current_bid
            BEFORE UPDATE OF current_bid ON lots
            FOR EACH ROW EXECUTE FUNCTION fn_guard_current_bid();
    """)
    op.execute("COMMENT ON COLUMN lots.current_bid IS 'Cents; only moves up, via conditional UPDATE on bid';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS lots CASCADE;")
