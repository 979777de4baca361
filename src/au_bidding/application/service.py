"""BiddingService — authoritative read-check-write for one bid.

    read lot -> BidValidator.check -> conditional UPDATE -> bid_history INSERT

No in-process lock is held: the conditional UPDATE (current_bid must still
equal the expected value, lot active and open) is the single point of
serialization, and a miss surfaces as StaleBidError so the caller refreshes
and retries.

When the client declares the current_bid it priced against, validation and
the compare-and-set both use that value; a client pricing against a stale
view therefore always gets StaleBidError, never a silent re-price.

A client-supplied bid_id makes the write idempotent. bid_id is the
bid_history primary key, so a resubmission of a bid that already committed
(e.g. its response was lost) returns the recorded bid instead of a conflict.
"""

import dataclasses
import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.au_bidding.application.schemas import PlaceBidResponse
from src.au_bidding.domain.models import BidAttempt
from src.au_bidding.domain.validator import BidValidator
from src.au_common.datetime_utils import utc_now
from src.au_common.enums import BidPaymentType, BidStage
from src.au_common.errors import LotNotFoundError, StaleBidError, ValidationError
from src.au_common.id_generator import generate_id
from src.au_lot.application.schemas import BidOut, LotOut
from src.au_lot.domain.models import Bid
from src.au_lot.domain.repository import LotRepositoryProtocol
from src.au_lot.infrastructure.persistence import LotRepository

logger = logging.getLogger(__name__)


class BiddingService:
    def __init__(
        self,
        repo: LotRepositoryProtocol | None = None,
        validator: BidValidator | None = None,
    ) -> None:
        self._repo: LotRepositoryProtocol = repo or LotRepository()
        self._validator = validator or BidValidator(
            timedelta(seconds=settings.ANTI_SNIPE_WINDOW_SECONDS)
        )

    async def place_bid(
        self,
        db: AsyncSession,
        lot_id: str,
        bidder_id: str,
        amount: object,
        payment_type: BidPaymentType,
        expected_current_bid: int | None = None,
        bid_id: str | None = None,
    ) -> PlaceBidResponse:
        now = utc_now()
        if bid_id is not None:
            replay = await self._replay(db, bid_id, lot_id, bidder_id, now)
            if replay is not None:
                return replay

        attempt = BidAttempt(
            lot_id=lot_id,
            bidder_id=bidder_id,
            amount=amount,
            payment_type=payment_type,
            received_at=now,
        )

        lot = await self._repo.get_lot(db, lot_id, now)
        if lot is None:
            raise LotNotFoundError(lot_id)
        if expected_current_bid is not None:
            lot = dataclasses.replace(lot, current_bid=expected_current_bid)

        decision = self._validator.check(attempt, lot, now)
        min_closes_at = now + self._validator.anti_snipe_window

        bid = Bid(
            id=bid_id or generate_id("BID"),
            lot_id=lot_id,
            bidder_id=bidder_id,
            amount=decision.new_bid,
            payment_type=payment_type.value,
            submitted_at=now,
        )
        try:
            updated = await self._repo.apply_bid(
                db,
                lot_id,
                decision.expected_current_bid,
                decision.new_bid,
                min_closes_at,
                now,
            )
            if updated is None:
                raise StaleBidError(lot_id)
            await self._repo.insert_bid(db, bid)
            await db.commit()
        except StaleBidError:
            await db.rollback()
            # The same bid_id may have committed while this request waited on
            # the row lock.
            if bid_id is not None:
                replay = await self._replay(db, bid_id, lot_id, bidder_id, now)
                if replay is not None:
                    return replay
            raise
        except Exception:
            await db.rollback()
            raise
        attempt.stage = BidStage.APPLIED

        extended = updated.closes_at == min_closes_at
        if extended:
            logger.info(
                "Lot %s closing extended to %s by bid %s",
                lot_id,
                min_closes_at.isoformat(),
                bid.id,
            )
        logger.info(
            "Bid %s accepted on lot %s: %d -> %d cents",
            bid.id,
            lot_id,
            decision.expected_current_bid,
            decision.new_bid,
        )
        return PlaceBidResponse(
            lot=LotOut.from_domain(updated),
            bid=BidOut.from_domain(bid),
            extended=extended,
        )

    async def _replay(
        self, db: AsyncSession, bid_id: str, lot_id: str, bidder_id: str, now: datetime
    ) -> PlaceBidResponse | None:
        """The recorded outcome of an already-committed bid_id, if any."""
        existing = await self._repo.get_bid(db, bid_id)
        if existing is None:
            return None
        if existing.lot_id != lot_id or existing.bidder_id != bidder_id:
            raise ValidationError(f"bid_id {bid_id} is already used by another bid")
        lot = await self._repo.get_lot(db, lot_id, now)
        if lot is None:
            raise LotNotFoundError(lot_id)
        logger.info("Bid %s on lot %s resubmitted; returning recorded bid", bid_id, lot_id)
        return PlaceBidResponse(
            lot=LotOut.from_domain(lot),
            bid=BidOut.from_domain(existing),
            extended=False,
        )
