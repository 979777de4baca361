"""AuctionCoordinator: one bidder session's live view of the catalog.

Two periodic tasks drive it:
  refresh loop (every REFRESH_INTERVAL_SECONDS): fetch all lots, reconcile
      every LotClock to the store, pad the catalog with placeholders
  tick loop (every TICK_INTERVAL_SECONDS): advance every LotClock by 1 s

Bids go straight to the store as a compare-and-set on current_bid; the
coordinator holds no lock across the await, so a concurrent bid by anyone
else surfaces as StaleBidError rather than being silently overwritten.

Each refresh takes a generation number when it starts; results older than
the last applied generation are discarded, so a slow fetch issued before a
bid can never roll the lot back to its pre-bid price.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TypeVar

from config.settings import settings
from src.au_auction.domain.models import LotView, SessionContext, make_placeholders
from src.au_auction.domain.store import LotStoreProtocol
from src.au_bidding.domain.models import BidAttempt
from src.au_bidding.domain.validator import BidValidator
from src.au_common.datetime_utils import utc_now
from src.au_common.enums import BidPaymentType, BidStage
from src.au_common.errors import (
    InactiveLotError,
    LotNotFoundError,
    StaleBidError,
    TransientIOError,
    ValidationError,
)
from src.au_common.id_generator import generate_id
from src.au_lot.domain.clock import LotClock
from src.au_lot.domain.models import Lot

logger = logging.getLogger(__name__)

T = TypeVar("T")


def store_now(lot: Lot) -> datetime:
    """The store's clock at the moment it served ``lot``.

    time_left_seconds is floored by the store, so this lands within one
    second after the store's read and seconds_left(store_now(lot)) equals
    time_left_seconds exactly.
    """
    if lot.closes_at is None:
        return utc_now()
    return lot.closes_at - timedelta(seconds=lot.time_left_seconds)


@dataclass
class _LotEntry:
    lot: Lot
    clock: LotClock
    draft_bid: int | None = None
    bid_in_flight: bool = False

    def view(self) -> LotView:
        lot = self.lot
        return LotView(
            id=lot.id,
            name=lot.name,
            description=lot.description,
            current_bid=lot.current_bid,
            min_raise=lot.min_raise,
            time_left_seconds=self.clock.time_left_seconds,
            is_active=lot.is_active,
            image_url=lot.image_url,
            sort_order=lot.sort_order,
            is_placeholder=lot.is_placeholder,
            draft_bid=self.draft_bid,
            bid_in_flight=self.bid_in_flight,
        )


class AuctionCoordinator:
    def __init__(
        self,
        store: LotStoreProtocol,
        session: SessionContext,
        *,
        validator: BidValidator | None = None,
        refresh_interval: float | None = None,
        tick_interval: float | None = None,
        min_display: int | None = None,
        timeout: float | None = None,
        retry_limit: int | None = None,
        backoff: float | None = None,
    ) -> None:
        self._store = store
        self._session = session
        self._validator = validator or BidValidator(
            timedelta(seconds=settings.ANTI_SNIPE_WINDOW_SECONDS)
        )
        self._refresh_interval = (
            settings.REFRESH_INTERVAL_SECONDS if refresh_interval is None else refresh_interval
        )
        self._tick_interval = settings.TICK_INTERVAL_SECONDS if tick_interval is None else tick_interval
        self._min_display = settings.MIN_DISPLAY_LOTS if min_display is None else min_display
        self._timeout = settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout
        self._retry_limit = settings.TRANSIENT_RETRY_LIMIT if retry_limit is None else retry_limit
        self._backoff = (
            settings.TRANSIENT_RETRY_BACKOFF_SECONDS if backoff is None else backoff
        )

        self._entries: dict[str, _LotEntry] = {}  # insertion order = display order
        self._issued_generation = 0
        self._applied_generation = 0
        self._tasks: list[asyncio.Task[None]] = []
        self.last_refresh_error: Exception | None = None

    @property
    def session(self) -> SessionContext:
        return self._session

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    # --- store access ---

    async def _call(self, what: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run one store call with a timeout, retrying TransientIOError.

        Backoff is linear: attempt n waits n * backoff seconds. After
        retry_limit retries the last TransientIOError is raised. Any other
        error propagates on the first occurrence.
        """
        attempt = 0
        while True:
            try:
                return await asyncio.wait_for(call(), timeout=self._timeout)
            except asyncio.TimeoutError:
                error = TransientIOError(f"{what} timed out after {self._timeout:g}s")
            except TransientIOError as exc:
                error = exc
            attempt += 1
            if attempt > self._retry_limit:
                logger.error("%s failed after %d attempts: %s", what, attempt, error.message)
                raise error
            logger.warning(
                "%s failed (attempt %d/%d): %s", what, attempt, self._retry_limit + 1, error.message
            )
            await asyncio.sleep(self._backoff * attempt)

    # --- catalog ---

    async def refresh(self) -> tuple[LotView, ...]:
        """Pull the authoritative catalog and reconcile every local clock."""
        self._issued_generation += 1
        generation = self._issued_generation
        lots = await self._call("fetch_lots", self._store.fetch_lots)
        if generation <= self._applied_generation:
            logger.debug("Discarding stale refresh generation %d", generation)
            return self.snapshot()
        self._applied_generation = generation
        self._apply_catalog(lots)
        self.last_refresh_error = None
        return self.snapshot()

    def _apply_catalog(self, lots: list[Lot]) -> None:
        now = utc_now()
        entries: dict[str, _LotEntry] = {}
        for lot in lots:
            entry = self._entries.get(lot.id)
            if entry is None or entry.lot.is_placeholder:
                entry = _LotEntry(lot=lot, clock=LotClock.from_server(lot.time_left_seconds, now))
            else:
                entry.lot = lot
                entry.clock.reconcile(lot.time_left_seconds, now)
                if entry.draft_bid is not None and entry.draft_bid < lot.minimum_bid:
                    entry.draft_bid = lot.minimum_bid
            entries[lot.id] = entry

        dropped = [lot_id for lot_id, e in self._entries.items()
                   if lot_id not in entries and not e.lot.is_placeholder]
        if dropped:
            logger.info("Lots no longer in catalog: %s", ", ".join(dropped))

        missing = self._min_display - len(entries)
        if missing > 0:
            for placeholder in make_placeholders(missing, start=len(entries)):
                entries[placeholder.id] = _LotEntry(
                    lot=placeholder, clock=LotClock(0, now)
                )
        self._entries = entries

    def _apply_lot(self, lot: Lot) -> None:
        """Adopt one authoritative lot snapshot (e.g. returned by a bid)."""
        self._issued_generation += 1
        self._applied_generation = self._issued_generation
        entry = self._entries.get(lot.id)
        if entry is None:
            return
        entry.lot = lot
        entry.clock.reconcile(lot.time_left_seconds)

    def tick(self) -> None:
        """Advance every local clock by one second. Never contacts the store."""
        for entry in self._entries.values():
            entry.clock.tick()

    def snapshot(self) -> tuple[LotView, ...]:
        return tuple(entry.view() for entry in self._entries.values())

    def get_view(self, lot_id: str) -> LotView:
        entry = self._entries.get(lot_id)
        if entry is None:
            raise LotNotFoundError(lot_id)
        return entry.view()

    # --- bidding ---

    async def submit_bid(
        self, lot_id: str, amount: object, payment_type: BidPaymentType
    ) -> Lot:
        """Validate against a fresh read, then compare-and-set on the store.

        The closed check runs on the store's clock: "now" is recovered from
        the fetched lot's closes_at and time_left_seconds, so local clock
        skew never rejects a bid the store would accept. One bid_id is used
        for every retry of the write, so a retry after a lost response
        reports the bid as applied instead of stale.

        Returns the updated lot. Raises InactiveLotError, LotNotFoundError,
        ValidationError / BidTooLowError, StaleBidError or TransientIOError.
        """
        entry = self._entries.get(lot_id)
        if entry is not None and entry.lot.is_placeholder:
            raise InactiveLotError(lot_id, "inactive")

        attempt = BidAttempt(
            lot_id=lot_id,
            bidder_id=self._session.bidder_id,
            amount=amount,
            payment_type=payment_type,
            received_at=utc_now(),
        )
        bid_id = generate_id("BID")
        if entry is not None:
            entry.bid_in_flight = True
        try:
            lot = await self._call("fetch_lot", lambda: self._store.fetch_lot(lot_id))
            if lot is None:
                raise LotNotFoundError(lot_id)
            decision = self._validator.check(attempt, lot, store_now(lot))
            updated = await self._call(
                "conditional_bid",
                lambda: self._store.conditional_bid(
                    lot_id, decision.expected_current_bid, decision.new_bid, payment_type, bid_id
                ),
            )
            if updated is None:
                attempt.stage = BidStage.REJECTED
                raise StaleBidError(lot_id)
        finally:
            if entry is not None:
                entry.bid_in_flight = False

        attempt.stage = BidStage.APPLIED
        logger.info(
            "Bidder %s bid %d cents on lot %s (%s)",
            self._session.bidder_id, decision.new_bid, lot_id, bid_id,
        )
        self._apply_lot(updated)
        if entry is not None:
            entry.draft_bid = None

        try:
            await self.refresh()
        except Exception as exc:
            # Bid is committed; the catalog keeps the bid snapshot until the next refresh.
            self.last_refresh_error = exc
            logger.warning("Refresh after bid on lot %s failed: %s", lot_id, exc)
        return updated

    # --- draft bid (bid dialog) ---

    def _biddable_entry(self, lot_id: str) -> _LotEntry:
        entry = self._entries.get(lot_id)
        if entry is None:
            raise LotNotFoundError(lot_id)
        if entry.lot.is_placeholder or not entry.lot.is_active:
            raise InactiveLotError(lot_id, "inactive")
        return entry

    def open_draft(self, lot_id: str) -> int:
        """Start a draft at the minimum acceptable bid."""
        entry = self._biddable_entry(lot_id)
        entry.draft_bid = entry.lot.minimum_bid
        return entry.draft_bid

    def adjust_draft(self, lot_id: str, delta: int) -> int:
        """Move the draft by ``delta`` cents, never below the minimum bid."""
        entry = self._biddable_entry(lot_id)
        minimum = entry.lot.minimum_bid
        base = minimum if entry.draft_bid is None else entry.draft_bid
        entry.draft_bid = max(base + delta, minimum)
        return entry.draft_bid

    def discard_draft(self, lot_id: str) -> None:
        entry = self._entries.get(lot_id)
        if entry is not None:
            entry.draft_bid = None

    async def submit_draft(self, lot_id: str, payment_type: BidPaymentType) -> Lot:
        entry = self._biddable_entry(lot_id)
        if entry.draft_bid is None:
            raise ValidationError(f"No draft bid open on lot {lot_id}")
        return await self.submit_bid(lot_id, entry.draft_bid, payment_type)

    # --- lifecycle ---

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._refresh_loop(), name="auction-refresh"),
            asyncio.create_task(self._tick_loop(), name="auction-tick"),
        ]
        logger.info(
            "Coordinator started for bidder %s (refresh %gs, tick %gs)",
            self._session.bidder_id,
            self._refresh_interval,
            self._tick_interval,
        )

    async def stop(self) -> None:
        """Cancel the timers. Bids already awaiting the store complete normally."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info("Coordinator stopped for bidder %s", self._session.bidder_id)

    async def __aenter__(self) -> "AuctionCoordinator":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _refresh_loop(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception as exc:
                self.last_refresh_error = exc
                logger.warning("Catalog refresh failed: %s", exc)
            await asyncio.sleep(self._refresh_interval)

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self.tick()
