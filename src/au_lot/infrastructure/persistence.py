"""LotRepository — concrete implementation of LotRepositoryProtocol.

All queries use raw text() SQL (no ORM).
time_left_seconds is derived here from closes_at and the caller's `now`,
so one request sees one consistent clock.

The bid write is a compare-and-set on current_bid that also requires the lot
to be active and still open: PostgreSQL's row lock on UPDATE serializes
concurrent bids, and the loser matches zero rows.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.datetime_utils import seconds_until
from src.au_lot.domain.models import Bid, Lot

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_LOT_COLUMNS = """
    id, name, description, current_bid, min_raise, closes_at,
    is_active, image_url, sort_order
"""

_BID_COLUMNS = "id, lot_id, bidder_id, amount, payment_type, submitted_at"

_LIST_LOTS_SQL = text(f"""
    SELECT {_LOT_COLUMNS}
    FROM lots
    WHERE (CAST(:active_only AS BOOLEAN) IS FALSE OR is_active)
    ORDER BY sort_order ASC, id ASC
""")

_GET_LOT_SQL = text(f"""
    SELECT {_LOT_COLUMNS}
    FROM lots
    WHERE id = :lot_id
""")

# Anti-snipe is re-evaluated on the live row: GREATEST(closes_at, now + window)
# is the later of the stored close and the extension floor, so a concurrent
# admin edit of closes_at is never overwritten with a value read earlier.
_APPLY_BID_SQL = text(f"""
    UPDATE lots
    SET current_bid = :new_bid,
        closes_at   = GREATEST(closes_at, :min_closes_at),
        updated_at  = :now
    WHERE id = :lot_id
      AND current_bid = :expected_current_bid
      AND is_active
      AND closes_at > :now
    RETURNING {_LOT_COLUMNS}
""")

_GET_BID_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bid_history
    WHERE id = :bid_id
""")

_INSERT_BID_SQL = text("""
    INSERT INTO bid_history (id, lot_id, bidder_id, amount, payment_type, submitted_at)
    VALUES (:id, :lot_id, :bidder_id, :amount, :payment_type, :submitted_at)
""")

_LIST_BIDS_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bid_history
    WHERE lot_id = :lot_id
    ORDER BY submitted_at DESC, id DESC
    LIMIT :limit
""")

_WINNING_BID_SQL = text(f"""
    SELECT {_BID_COLUMNS}
    FROM bid_history
    WHERE lot_id = :lot_id
    ORDER BY amount DESC, submitted_at ASC
    LIMIT 1
""")

_INSERT_LOT_SQL = text(f"""
    INSERT INTO lots (
        id, name, description, current_bid, min_raise, closes_at,
        is_active, image_url, sort_order, created_at, updated_at
    ) VALUES (
        :id, :name, :description, :current_bid, :min_raise, :closes_at,
        :is_active, :image_url, :sort_order, :now, :now
    )
    RETURNING {_LOT_COLUMNS}
""")

_SET_ACTIVE_SQL = text(f"""
    UPDATE lots
    SET is_active = :is_active, updated_at = :now
    WHERE id = :lot_id
    RETURNING {_LOT_COLUMNS}
""")

# current_bid is deliberately absent: it only moves through apply_bid.
_UPDATABLE_LOT_COLUMNS = (
    "name", "description", "min_raise", "closes_at", "image_url", "sort_order",
)

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_lot(row: object, now: datetime) -> Lot:
    closes_at: datetime = row.closes_at  # type: ignore[attr-defined]
    return Lot(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        current_bid=row.current_bid,  # type: ignore[attr-defined]
        min_raise=row.min_raise,  # type: ignore[attr-defined]
        closes_at=closes_at,
        time_left_seconds=seconds_until(closes_at, now),
        is_active=row.is_active,  # type: ignore[attr-defined]
        image_url=row.image_url,  # type: ignore[attr-defined]
        sort_order=row.sort_order,  # type: ignore[attr-defined]
    )


def _row_to_bid(row: object) -> Bid:
    return Bid(
        id=row.id,  # type: ignore[attr-defined]
        lot_id=row.lot_id,  # type: ignore[attr-defined]
        bidder_id=str(row.bidder_id),  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        payment_type=row.payment_type,  # type: ignore[attr-defined]
        submitted_at=row.submitted_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class LotRepository:
    async def list_lots(
        self, db: AsyncSession, now: datetime, active_only: bool = False
    ) -> list[Lot]:
        result = await db.execute(_LIST_LOTS_SQL, {"active_only": active_only})
        return [_row_to_lot(row, now) for row in result.fetchall()]

    async def get_lot(self, db: AsyncSession, lot_id: str, now: datetime) -> Lot | None:
        result = await db.execute(_GET_LOT_SQL, {"lot_id": lot_id})
        row = result.fetchone()
        return _row_to_lot(row, now) if row else None

    async def apply_bid(
        self,
        db: AsyncSession,
        lot_id: str,
        expected_current_bid: int,
        new_bid: int,
        min_closes_at: datetime,
        now: datetime,
    ) -> Lot | None:
        result = await db.execute(
            _APPLY_BID_SQL,
            {
                "lot_id": lot_id,
                "expected_current_bid": expected_current_bid,
                "new_bid": new_bid,
                "min_closes_at": min_closes_at,
                "now": now,
            },
        )
        row = result.fetchone()
        return _row_to_lot(row, now) if row else None

    async def get_bid(self, db: AsyncSession, bid_id: str) -> Bid | None:
        result = await db.execute(_GET_BID_SQL, {"bid_id": bid_id})
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def insert_bid(self, db: AsyncSession, bid: Bid) -> None:
        await db.execute(
            _INSERT_BID_SQL,
            {
                "id": bid.id,
                "lot_id": bid.lot_id,
                "bidder_id": bid.bidder_id,
                "amount": bid.amount,
                "payment_type": bid.payment_type,
                "submitted_at": bid.submitted_at,
            },
        )

    async def list_bids(self, db: AsyncSession, lot_id: str, limit: int) -> list[Bid]:
        result = await db.execute(_LIST_BIDS_SQL, {"lot_id": lot_id, "limit": limit})
        return [_row_to_bid(row) for row in result.fetchall()]

    async def get_winning_bid(self, db: AsyncSession, lot_id: str) -> Bid | None:
        result = await db.execute(_WINNING_BID_SQL, {"lot_id": lot_id})
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def create_lot(self, db: AsyncSession, lot: Lot, now: datetime) -> Lot:
        result = await db.execute(
            _INSERT_LOT_SQL,
            {
                "id": lot.id,
                "name": lot.name,
                "description": lot.description,
                "current_bid": lot.current_bid,
                "min_raise": lot.min_raise,
                "closes_at": lot.closes_at,
                "is_active": lot.is_active,
                "image_url": lot.image_url,
                "sort_order": lot.sort_order,
                "now": now,
            },
        )
        return _row_to_lot(result.fetchone(), now)

    async def update_lot(
        self, db: AsyncSession, lot_id: str, fields: dict[str, object], now: datetime
    ) -> Lot | None:
        cols = [c for c in _UPDATABLE_LOT_COLUMNS if c in fields]
        if not cols:
            return await self.get_lot(db, lot_id, now)
        assignments = ", ".join(f"{c} = :{c}" for c in cols)
        stmt = text(
            f"UPDATE lots SET {assignments}, updated_at = :now"
            f" WHERE id = :lot_id RETURNING {_LOT_COLUMNS}"
        )
        params: dict[str, object] = {c: fields[c] for c in cols}
        params.update(lot_id=lot_id, now=now)
        result = await db.execute(stmt, params)
        row = result.fetchone()
        return _row_to_lot(row, now) if row else None

    async def set_active(
        self, db: AsyncSession, lot_id: str, is_active: bool, now: datetime
    ) -> Lot | None:
        result = await db.execute(
            _SET_ACTIVE_SQL, {"lot_id": lot_id, "is_active": is_active, "now": now}
        )
        row = result.fetchone()
        return _row_to_lot(row, now) if row else None
