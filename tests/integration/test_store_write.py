# tests/integration/test_store_write.py
"""Integration tests for the conditional bid write against live PostgreSQL.

Each test inserts its own throwaway lot so runs do not interfere.
"""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import text

from src.au_common.database import async_session_factory
from src.au_common.datetime_utils import utc_now
from src.au_lot.infrastructure.persistence import LotRepository

pytestmark = [pytest.mark.asyncio(loop_scope="session"), pytest.mark.integration]


async def _insert_lot(closes_in: timedelta, current_bid: int = 1000) -> str:
    lot_id = f"LOT-IT-{uuid.uuid4().hex[:12]}"
    async with async_session_factory() as session:
        await session.execute(
            text("""
                INSERT INTO lots (id, name, current_bid, min_raise, closes_at)
                VALUES (:id, 'integration lot', :current_bid, 100, :closes_at)
            """),
            {"id": lot_id, "current_bid": current_bid, "closes_at": utc_now() + closes_in},
        )
        await session.commit()
    return lot_id


class TestApplyBid:
    async def test_closed_lot_matches_no_row(self, client):
        lot_id = await _insert_lot(timedelta(seconds=-5))
        now = utc_now()
        async with async_session_factory() as session:
            lot = await LotRepository().apply_bid(
                session, lot_id, 1000, 1100, now + timedelta(minutes=10), now
            )
            await session.rollback()

        assert lot is None

    async def test_later_stored_close_is_kept(self, client):
        lot_id = await _insert_lot(timedelta(hours=5))
        now = utc_now()
        async with async_session_factory() as session:
            lot = await LotRepository().apply_bid(
                session, lot_id, 1000, 1100, now + timedelta(minutes=10), now
            )
            await session.commit()

        assert lot is not None
        assert lot.current_bid == 1100
        assert lot.time_left_seconds > 4 * 3600

    async def test_close_inside_window_is_extended(self, client):
        lot_id = await _insert_lot(timedelta(minutes=2))
        now = utc_now()
        floor = now + timedelta(minutes=10)
        async with async_session_factory() as session:
            lot = await LotRepository().apply_bid(session, lot_id, 1000, 1100, floor, now)
            await session.commit()

        assert lot is not None
        assert lot.closes_at == floor


class TestResubmit:
    async def test_same_bid_id_is_recorded_once(self, auth_client):
        lot_id = await _insert_lot(timedelta(hours=1))
        body = {
            "amount_cents": 1100,
            "payment_type": "CARD",
            "expected_current_bid_cents": 1000,
            "bid_id": f"BID-IT-{uuid.uuid4().hex[:12]}",
        }

        first = await auth_client.post(f"/api/v1/lots/{lot_id}/bids", json=body)
        again = await auth_client.post(f"/api/v1/lots/{lot_id}/bids", json=body)

        assert first.status_code == 201
        assert again.status_code == 201
        assert again.json()["data"]["bid"]["id"] == body["bid_id"]
        lot = await auth_client.get(f"/api/v1/lots/{lot_id}")
        assert lot.json()["data"]["current_bid_cents"] == 1100
