# src/au_lot/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol (the bidding
tests use an in-memory one with a real compare-and-set).
Infrastructure layer provides the SQL implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_lot.domain.models import Bid, Lot


class LotRepositoryProtocol(Protocol):
    async def list_lots(
        self, db: AsyncSession, now: datetime, active_only: bool = False
    ) -> list[Lot]: ...

    async def get_lot(self, db: AsyncSession, lot_id: str, now: datetime) -> Lot | None: ...

    async def apply_bid(
        self,
        db: AsyncSession,
        lot_id: str,
        expected_current_bid: int,
        new_bid: int,
        min_closes_at: datetime,
        now: datetime,
    ) -> Lot | None:
        """Conditional write: None when current_bid no longer equals expected
        or the lot is inactive or closed. closes_at becomes the later of its
        stored value and min_closes_at."""
        ...

    async def insert_bid(self, db: AsyncSession, bid: Bid) -> None: ...

    async def get_bid(self, db: AsyncSession, bid_id: str) -> Bid | None: ...

    async def list_bids(self, db: AsyncSession, lot_id: str, limit: int) -> list[Bid]: ...

    async def get_winning_bid(self, db: AsyncSession, lot_id: str) -> Bid | None: ...

    async def create_lot(self, db: AsyncSession, lot: Lot, now: datetime) -> Lot: ...

    async def update_lot(
        self, db: AsyncSession, lot_id: str, fields: dict[str, object], now: datetime
    ) -> Lot | None: ...

    async def set_active(
        self, db: AsyncSession, lot_id: str, is_active: bool, now: datetime
    ) -> Lot | None: ...
