"""Pydantic schemas for au_lot API responses.

LotOut is also the wire format HttpLotStore parses back into a Lot, so
to_domain() must stay the inverse of from_domain().
"""

from datetime import datetime

from pydantic import BaseModel

from src.au_common.cents import cents_to_display
from src.au_lot.domain.models import Bid, Lot


class LotOut(BaseModel):
    id: str
    name: str
    description: str | None
    current_bid_cents: int
    current_bid_display: str
    min_raise_cents: int
    minimum_bid_cents: int
    closes_at: datetime | None
    time_left_seconds: int
    is_active: bool
    image_url: str | None
    sort_order: int

    @classmethod
    def from_domain(cls, lot: Lot) -> "LotOut":
        return cls(
            id=lot.id,
            name=lot.name,
            description=lot.description,
            current_bid_cents=lot.current_bid,
            current_bid_display=cents_to_display(lot.current_bid),
            min_raise_cents=lot.min_raise,
            minimum_bid_cents=lot.minimum_bid,
            closes_at=lot.closes_at,
            time_left_seconds=lot.time_left_seconds,
            is_active=lot.is_active,
            image_url=lot.image_url,
            sort_order=lot.sort_order,
        )

    def to_domain(self) -> Lot:
        return Lot(
            id=self.id,
            name=self.name,
            description=self.description,
            current_bid=self.current_bid_cents,
            min_raise=self.min_raise_cents,
            closes_at=self.closes_at,
            time_left_seconds=self.time_left_seconds,
            is_active=self.is_active,
            image_url=self.image_url,
            sort_order=self.sort_order,
        )


class BidOut(BaseModel):
    id: str
    lot_id: str
    bidder_id: str
    amount_cents: int
    amount_display: str
    payment_type: str
    submitted_at: str

    @classmethod
    def from_domain(cls, bid: Bid) -> "BidOut":
        return cls(
            id=bid.id,
            lot_id=bid.lot_id,
            bidder_id=bid.bidder_id,
            amount_cents=bid.amount,
            amount_display=cents_to_display(bid.amount),
            payment_type=bid.payment_type,
            submitted_at=bid.submitted_at.isoformat(),
        )
