"""007: seed initial data

Revision ID: 007
Revises: 006
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Message options, base costs in cents
    op.execute("""
        INSERT INTO pricing_options (id, name, base_cost, description, sort_order) VALUES
            ('OPT-SHOUTOUT', 'Shout-out',        5000,  'A short personal message', 1),
            ('OPT-BIRTHDAY', 'Birthday message', 7500,  'Birthday wishes with your name', 2),
            ('OPT-ADVICE',   'Advice',           10000, 'An answer to one question', 3);
    """)

    # Sample lots closing a week after migration
    op.execute("""
        INSERT INTO lots (id, name, description, current_bid, min_raise, closes_at, image_url, sort_order) VALUES
            ('LOT-SIGNED-JERSEY', 'Signed jersey', 'Match-worn, signed on the back.',
             10000, 500, NOW() + INTERVAL '7 days', '/auction/jersey.jpg', 1),
            ('LOT-MEET-GREET', 'Meet and greet', 'Thirty minutes backstage.',
             25000, 1000, NOW() + INTERVAL '7 days', '/auction/meet.jpg', 2),
            ('LOT-POSTER', 'Tour poster', 'Limited print, numbered.',
             2000, 100, NOW() + INTERVAL '7 days', '/auction/poster.jpg', 3);
    """)


def downgrade() -> None:
    op.execute("DELETE FROM lots WHERE id IN ('LOT-SIGNED-JERSEY', 'LOT-MEET-GREET', 'LOT-POSTER');")
    op.execute("DELETE FROM pricing_options WHERE id IN ('OPT-SHOUTOUT', 'OPT-BIRTHDAY', 'OPT-ADVICE');")
