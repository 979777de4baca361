# src/au_admin/application/service.py
"""Admin application service: operator edits to lots and pricing options.

Every write commits or rolls back here; routers only check the admin role.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_admin.application.schemas import (
    CreateLotRequest,
    CreateOptionRequest,
    FinishLotResponse,
    UpdateLotRequest,
    UpdateOptionRequest,
)
from src.au_common.datetime_utils import utc_now
from src.au_common.errors import LotNotFoundError, OptionNotFoundError
from src.au_common.id_generator import generate_id
from src.au_lot.application.schemas import BidOut, LotOut
from src.au_lot.domain.models import Lot
from src.au_lot.domain.repository import LotRepositoryProtocol
from src.au_lot.infrastructure.persistence import LotRepository
from src.au_pricing.application.schemas import PricingOptionOut
from src.au_pricing.domain.models import PricingOption
from src.au_pricing.domain.repository import PricingRepositoryProtocol
from src.au_pricing.infrastructure.persistence import PricingRepository

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        lots: LotRepositoryProtocol | None = None,
        pricing: PricingRepositoryProtocol | None = None,
    ) -> None:
        self._lots: LotRepositoryProtocol = lots or LotRepository()
        self._pricing: PricingRepositoryProtocol = pricing or PricingRepository()

    # --- lots ---

    async def create_lot(self, db: AsyncSession, req: CreateLotRequest) -> LotOut:
        now = utc_now()
        lot = Lot(
            id=generate_id("LOT"),
            name=req.name,
            description=req.description,
            current_bid=req.starting_bid_cents,
            min_raise=req.min_raise_cents,
            closes_at=req.closes_at,
            time_left_seconds=0,
            is_active=req.is_active,
            image_url=req.image_url,
            sort_order=req.sort_order,
        )
        try:
            created = await self._lots.create_lot(db, lot, now)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Lot %s created, closes at %s", created.id, req.closes_at.isoformat())
        return LotOut.from_domain(created)

    async def update_lot(self, db: AsyncSession, lot_id: str, req: UpdateLotRequest) -> LotOut:
        try:
            updated = await self._lots.update_lot(db, lot_id, req.to_fields(), utc_now())
            if updated is None:
                raise LotNotFoundError(lot_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return LotOut.from_domain(updated)

    async def set_active(self, db: AsyncSession, lot_id: str, is_active: bool) -> LotOut:
        try:
            updated = await self._lots.set_active(db, lot_id, is_active, utc_now())
            if updated is None:
                raise LotNotFoundError(lot_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Lot %s %s", lot_id, "activated" if is_active else "deactivated")
        return LotOut.from_domain(updated)

    async def finish_lot(self, db: AsyncSession, lot_id: str) -> FinishLotResponse:
        """Deactivate the lot and report the winning (highest) bid, if any."""
        try:
            lot = await self._lots.set_active(db, lot_id, False, utc_now())
            if lot is None:
                raise LotNotFoundError(lot_id)
            winner = await self._lots.get_winning_bid(db, lot_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if winner is None:
            logger.info("Lot %s finished with no bids", lot_id)
        else:
            logger.info(
                "Lot %s finished: winner %s at %d cents", lot_id, winner.bidder_id, winner.amount
            )
        return FinishLotResponse(
            lot=LotOut.from_domain(lot),
            winner=BidOut.from_domain(winner) if winner else None,
        )

    async def list_bids(self, db: AsyncSession, lot_id: str, limit: int) -> list[BidOut]:
        if await self._lots.get_lot(db, lot_id, utc_now()) is None:
            raise LotNotFoundError(lot_id)
        bids = await self._lots.list_bids(db, lot_id, limit)
        return [BidOut.from_domain(b) for b in bids]

    # --- pricing options ---

    async def create_option(self, db: AsyncSession, req: CreateOptionRequest) -> PricingOptionOut:
        option = PricingOption(
            id=generate_id("OPT"),
            name=req.name,
            base_cost=req.base_cost_cents,
            description=req.description,
            sort_order=req.sort_order,
        )
        try:
            created = await self._pricing.create_option(db, option)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PricingOptionOut.from_domain(created)

    async def update_option(
        self, db: AsyncSession, option_id: str, req: UpdateOptionRequest
    ) -> PricingOptionOut:
        try:
            updated = await self._pricing.update_option(db, option_id, req.to_fields())
            if updated is None:
                raise OptionNotFoundError(option_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PricingOptionOut.from_domain(updated)
