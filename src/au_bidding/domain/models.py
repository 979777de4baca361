"""Bid submission attempt: tracks one attempt through BidStage."""

from dataclasses import dataclass, field
from datetime import datetime

from src.au_common.enums import BidPaymentType, BidStage


@dataclass
class BidAttempt:
    lot_id: str
    bidder_id: str
    amount: object  # validated to int cents by BidValidator
    payment_type: BidPaymentType
    received_at: datetime
    stage: BidStage = BidStage.RECEIVED
    rejection: str | None = None


@dataclass(frozen=True)
class BidDecision:
    """Outcome of an accepted check: what the store write must apply."""

    lot_id: str
    expected_current_bid: int
    new_bid: int
    closes_at: datetime
    extended: bool = field(default=False)
