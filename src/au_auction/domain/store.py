"""LotStoreProtocol — what the coordinator needs from the authoritative store."""

from typing import Protocol

from src.au_common.enums import BidPaymentType
from src.au_lot.domain.models import Lot


class LotStoreProtocol(Protocol):
    async def fetch_lots(self) -> list[Lot]:
        """All lots in display order, time_left computed by the store."""
        ...

    async def fetch_lot(self, lot_id: str) -> Lot | None: ...

    async def conditional_bid(
        self,
        lot_id: str,
        expected_current_bid: int,
        new_bid: int,
        payment_type: BidPaymentType,
        bid_id: str,
    ) -> Lot | None:
        """Apply the bid only if current_bid still equals expected_current_bid.

        Returns the updated lot, or None when the compare-and-set missed.
        Idempotent per bid_id: repeating a call whose write already landed
        returns the lot instead of None.
        """
        ...
