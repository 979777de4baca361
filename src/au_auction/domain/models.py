"""Client-session models for the live catalog.

LotView is what a UI renders: the store's lot plus the local countdown and
the per-lot ephemeral state (draft bid, bid in flight). Views are frozen
snapshots; the coordinator builds fresh ones on every snapshot() call.
"""

from dataclasses import dataclass

from src.au_common.cents import cents_to_display
from src.au_lot.domain.models import Lot

PLACEHOLDER_PREFIX = "placeholder-"
PLACEHOLDER_NAME = "Coming Soon"
PLACEHOLDER_DESCRIPTION = "This item will be available soon!"
PLACEHOLDER_IMAGE_URL = "/auction/comingsoon.jpg"


@dataclass(frozen=True)
class SessionContext:
    """Who is bidding in this session. Passed in explicitly, never global."""

    bidder_id: str
    access_token: str

    def __repr__(self) -> str:
        return f"SessionContext(bidder_id={self.bidder_id!r}, access_token='***')"


@dataclass(frozen=True)
class LotView:
    id: str
    name: str
    description: str | None
    current_bid: int
    min_raise: int
    time_left_seconds: int  # local clock, not the store's read-time value
    is_active: bool
    image_url: str | None
    sort_order: int
    is_placeholder: bool = False
    draft_bid: int | None = None
    bid_in_flight: bool = False

    @property
    def minimum_bid(self) -> int:
        return self.current_bid + self.min_raise

    @property
    def current_bid_display(self) -> str:
        return cents_to_display(self.current_bid)

    @property
    def biddable(self) -> bool:
        return self.is_active and not self.is_placeholder and self.time_left_seconds > 0


def make_placeholders(count: int, start: int = 0) -> list[Lot]:
    """Inert "Coming Soon" lots used to pad a short catalog."""
    return [
        Lot(
            id=f"{PLACEHOLDER_PREFIX}{i}",
            name=PLACEHOLDER_NAME,
            description=PLACEHOLDER_DESCRIPTION,
            current_bid=0,
            min_raise=0,
            closes_at=None,
            time_left_seconds=0,
            is_active=False,
            image_url=PLACEHOLDER_IMAGE_URL,
            sort_order=i,
            is_placeholder=True,
        )
        for i in range(start, start + count)
    ]
