"""Pydantic schemas for bid submission."""

from pydantic import BaseModel, Field

from src.au_common.enums import BidPaymentType
from src.au_lot.application.schemas import BidOut, LotOut


class PlaceBidRequest(BaseModel):
    # Strict int: 1050.5 or "1050" are rejected at the edge, not rounded.
    amount_cents: int = Field(strict=True)
    payment_type: BidPaymentType
    expected_current_bid_cents: int | None = Field(
        default=None,
        description="current_bid the client priced against; enables compare-and-set",
    )
    bid_id: str | None = Field(
        default=None,
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z0-9_\-]+$",
        description="client-generated id; resubmitting it returns the recorded bid",
    )


class PlaceBidResponse(BaseModel):
    lot: LotOut
    bid: BidOut
    extended: bool
