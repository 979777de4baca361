"""001: create common functions

Revision ID: 001
Revises: 
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    # current_bid never decreases, whichever code path issues the UPDATE.
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_guard_current_bid()
        RETURNS TRIGGER AS $$
        BEGIN
            IF NEW.current_bid < OLD.current_bid THEN
                RAISE EXCEPTION 'current_bid of lot % cannot decrease (% -> %)',
                    OLD.id, OLD.current_bid, NEW.current_bid
                    USING ERRCODE = 'check_violation';
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS fn_guard_current_bid();")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
