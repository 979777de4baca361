"""Domain models for au_lot: pure dataclasses, no business logic.

Lot is frozen: the catalog and the bid path replace whole snapshots
(dataclasses.replace) instead of mutating shared instances.
"""

from dataclasses import dataclass
from datetime import datetime

from src.au_common.datetime_utils import seconds_until


@dataclass(frozen=True)
class Lot:
    id: str
    name: str
    description: str | None
    current_bid: int  # cents, non-decreasing
    min_raise: int  # cents
    closes_at: datetime | None  # None only for placeholders
    time_left_seconds: int  # as computed by the store at read time
    is_active: bool
    image_url: str | None = None
    sort_order: int = 0
    is_placeholder: bool = False

    @property
    def minimum_bid(self) -> int:
        """Smallest amount the next bid may have."""
        return self.current_bid + self.min_raise

    def seconds_left(self, now: datetime) -> int:
        if self.closes_at is None:
            return 0
        return seconds_until(self.closes_at, now)


@dataclass(frozen=True)
class Bid:
    id: str
    lot_id: str
    bidder_id: str
    amount: int  # cents
    payment_type: str  # PAYPAL / CARD
    submitted_at: datetime
