# tests/unit/test_auction_coordinator.py
"""Unit tests for AuctionCoordinator against an in-memory lot store."""
import asyncio
import dataclasses
from datetime import timedelta

import pytest

from src.au_auction.domain.models import SessionContext
from src.au_auction.engine.coordinator import AuctionCoordinator
from src.au_common.datetime_utils import utc_now
from src.au_common.enums import BidPaymentType
from src.au_common.errors import (
    BidTooLowError,
    InactiveLotError,
    InvalidCredentialsError,
    LotNotFoundError,
    StaleBidError,
    TransientIOError,
)
from src.au_lot.domain.models import Lot


class FakeStore:
    def __init__(self, *lots: Lot) -> None:
        self.lots = {lot.id: lot for lot in lots}
        self.fetch_calls = 0
        self.fetch_lot_calls = 0
        self.bid_calls: list[tuple[str, int, int]] = []
        self.failures = 0
        self.error: Exception | None = None
        self.fetch_delay = 0.0
        self.gate: asyncio.Event | None = None
        self.bid_gate: asyncio.Event | None = None
        self.before_bid = None
        self.bid_ids: list[str] = []
        self.applied: set[str] = set()
        self.hang_after_write = 0.0

    async def fetch_lots(self) -> list[Lot]:
        self.fetch_calls += 1
        if self.error is not None:
            raise self.error
        if self.failures:
            self.failures -= 1
            raise TransientIOError("store unreachable")
        snapshot = list(self.lots.values())
        if self.gate is not None:
            gate, self.gate = self.gate, None
            await gate.wait()
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        return snapshot

    async def fetch_lot(self, lot_id: str) -> Lot | None:
        self.fetch_lot_calls += 1
        return self.lots.get(lot_id)

    async def conditional_bid(self, lot_id, expected_current_bid, new_bid, payment_type, bid_id):
        self.bid_calls.append((lot_id, expected_current_bid, new_bid))
        self.bid_ids.append(bid_id)
        if bid_id in self.applied:
            return self.lots[lot_id]
        if self.before_bid is not None:
            self.before_bid()
        if self.bid_gate is not None:
            await self.bid_gate.wait()
        lot = self.lots.get(lot_id)
        if lot is None or lot.current_bid != expected_current_bid:
            return None
        lot = dataclasses.replace(lot, current_bid=new_bid)
        self.lots[lot_id] = lot
        self.applied.add(bid_id)
        if self.hang_after_write:
            hang, self.hang_after_write = self.hang_after_write, 0.0
            await asyncio.sleep(hang)  # write landed, response never arrives
        return lot


def _make_lot(lot_id: str = "LOT-1", **kwargs) -> Lot:
    defaults = dict(
        id=lot_id, name=f"Lot {lot_id}", description=None,
        current_bid=10000, min_raise=500,
        closes_at=utc_now() + timedelta(hours=1), time_left_seconds=3600,
        is_active=True,
    )
    defaults.update(kwargs)
    return Lot(**defaults)


SESSION = SessionContext(bidder_id="bidder-1", access_token="token-abc")


def _coordinator(store: FakeStore, **kwargs) -> AuctionCoordinator:
    defaults = dict(
        refresh_interval=0.01, tick_interval=0.01, min_display=5,
        timeout=1.0, retry_limit=3, backoff=0.0,
    )
    defaults.update(kwargs)
    return AuctionCoordinator(store, SESSION, **defaults)


class TestRefresh:
    @pytest.mark.asyncio
    async def test_pads_short_catalog_with_placeholders(self):
        store = FakeStore(*(_make_lot(f"LOT-{i}") for i in range(3)))
        views = await _coordinator(store).refresh()

        assert len(views) == 5
        assert [v.id for v in views[:3]] == ["LOT-0", "LOT-1", "LOT-2"]
        placeholders = views[3:]
        assert [p.id for p in placeholders] == ["placeholder-3", "placeholder-4"]
        for p in placeholders:
            assert p.is_placeholder
            assert p.name == "Coming Soon"
            assert p.current_bid == 0 and p.min_raise == 0 and p.time_left_seconds == 0
            assert not p.biddable

    @pytest.mark.asyncio
    async def test_long_catalog_not_padded(self):
        store = FakeStore(*(_make_lot(f"LOT-{i}") for i in range(6)))
        views = await _coordinator(store).refresh()

        assert len(views) == 6
        assert not any(v.is_placeholder for v in views)

    @pytest.mark.asyncio
    async def test_reconcile_replaces_drifted_clock(self):
        store = FakeStore(_make_lot(time_left_seconds=900))
        coord = _coordinator(store)
        await coord.refresh()
        for _ in range(600):
            coord.tick()
        assert coord.get_view("LOT-1").time_left_seconds == 300

        store.lots["LOT-1"] = _make_lot(time_left_seconds=450)
        await coord.refresh()

        assert coord.get_view("LOT-1").time_left_seconds == 450

    @pytest.mark.asyncio
    async def test_tick_never_contacts_store(self):
        store = FakeStore(_make_lot(time_left_seconds=10))
        coord = _coordinator(store)
        await coord.refresh()
        coord.tick()
        coord.tick()

        assert store.fetch_calls == 1
        assert coord.get_view("LOT-1").time_left_seconds == 8

    @pytest.mark.asyncio
    async def test_removed_lot_dropped(self):
        store = FakeStore(_make_lot("LOT-1"), _make_lot("LOT-2"))
        coord = _coordinator(store, min_display=0)
        await coord.refresh()
        del store.lots["LOT-2"]

        views = await coord.refresh()

        assert [v.id for v in views] == ["LOT-1"]

    @pytest.mark.asyncio
    async def test_draft_survives_refresh(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store)
        await coord.refresh()
        coord.open_draft("LOT-1")
        coord.adjust_draft("LOT-1", 1000)

        await coord.refresh()

        assert coord.get_view("LOT-1").draft_bid == 11500

    @pytest.mark.asyncio
    async def test_draft_raised_when_minimum_moves_past_it(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store)
        await coord.refresh()
        coord.open_draft("LOT-1")
        store.lots["LOT-1"] = _make_lot(current_bid=12000)

        await coord.refresh()

        assert coord.get_view("LOT-1").draft_bid == 12500

    @pytest.mark.asyncio
    async def test_snapshot_is_immutable(self):
        coord = _coordinator(FakeStore(_make_lot()))
        views = await coord.refresh()

        assert isinstance(views, tuple)
        with pytest.raises(AttributeError):
            views[0].current_bid = 1  # type: ignore[misc]


class TestRetries:
    @pytest.mark.asyncio
    async def test_transient_failures_retried(self):
        store = FakeStore(_make_lot())
        store.failures = 2
        views = await _coordinator(store, retry_limit=3).refresh()

        assert store.fetch_calls == 3
        assert views[0].id == "LOT-1"

    @pytest.mark.asyncio
    async def test_gives_up_after_limit(self):
        store = FakeStore(_make_lot())
        store.failures = 10
        with pytest.raises(TransientIOError):
            await _coordinator(store, retry_limit=3).refresh()

        assert store.fetch_calls == 4

    @pytest.mark.asyncio
    async def test_timeout_becomes_transient(self):
        store = FakeStore(_make_lot())
        store.fetch_delay = 1.0
        with pytest.raises(TransientIOError, match="timed out"):
            await _coordinator(store, timeout=0.01, retry_limit=0).refresh()

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self):
        store = FakeStore(_make_lot())
        store.error = InvalidCredentialsError()
        with pytest.raises(InvalidCredentialsError):
            await _coordinator(store).refresh()

        assert store.fetch_calls == 1


class TestSubmitBid:
    @pytest.mark.asyncio
    async def test_accepted_bid_updates_view(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store)
        await coord.refresh()

        lot = await coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD)

        assert lot.current_bid == 10500
        view = coord.get_view("LOT-1")
        assert view.current_bid == 10500
        assert view.minimum_bid == 11000
        assert view.bid_in_flight is False
        assert store.bid_calls == [("LOT-1", 10000, 10500)]
        assert store.fetch_calls == 2  # follow-up refresh

    @pytest.mark.asyncio
    async def test_placeholder_rejected_without_store_call(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store)
        await coord.refresh()

        with pytest.raises(InactiveLotError):
            await coord.submit_bid("placeholder-1", 100, BidPaymentType.CARD)

        assert store.fetch_lot_calls == 0
        assert store.bid_calls == []

    @pytest.mark.asyncio
    async def test_validated_against_fresh_read(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store)
        await coord.refresh()
        store.lots["LOT-1"] = _make_lot(current_bid=12000)

        with pytest.raises(BidTooLowError):
            await coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD)

        assert store.bid_calls == []

    @pytest.mark.asyncio
    async def test_lost_race_is_stale(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store)
        await coord.refresh()

        def rival_bid():
            store.lots["LOT-1"] = _make_lot(current_bid=10500)

        store.before_bid = rival_bid

        with pytest.raises(StaleBidError):
            await coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD)

        assert store.lots["LOT-1"].current_bid == 10500
        assert coord.get_view("LOT-1").bid_in_flight is False

    @pytest.mark.asyncio
    async def test_closed_check_uses_store_clock(self):
        # Local clock runs ahead of the store: closes_at already passed
        # locally, but the store reports two minutes left.
        store = FakeStore(
            _make_lot(closes_at=utc_now() - timedelta(seconds=60), time_left_seconds=120)
        )
        coord = _coordinator(store)
        await coord.refresh()

        lot = await coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD)

        assert lot.current_bid == 10500
        assert store.bid_calls == [("LOT-1", 10000, 10500)]

    @pytest.mark.asyncio
    async def test_store_closed_lot_rejected_despite_lagging_local_clock(self):
        store = FakeStore(_make_lot(closes_at=utc_now() + timedelta(hours=1), time_left_seconds=0))
        coord = _coordinator(store)
        await coord.refresh()

        with pytest.raises(InactiveLotError, match="closed"):
            await coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD)

        assert store.bid_calls == []

    @pytest.mark.asyncio
    async def test_retry_after_lost_response_reports_applied(self):
        store = FakeStore(_make_lot())
        store.hang_after_write = 5.0
        coord = _coordinator(store, timeout=0.1)
        await coord.refresh()

        lot = await coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD)

        assert lot.current_bid == 10500
        assert len(store.bid_calls) == 2
        assert store.bid_ids[0] == store.bid_ids[1]
        assert coord.get_view("LOT-1").current_bid == 10500

    @pytest.mark.asyncio
    async def test_each_submission_gets_its_own_bid_id(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store)
        await coord.refresh()

        await coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD)
        await coord.submit_bid("LOT-1", 11000, BidPaymentType.CARD)

        assert len(set(store.bid_ids)) == 2
        assert store.lots["LOT-1"].current_bid == 11000

    @pytest.mark.asyncio
    async def test_unknown_lot(self):
        coord = _coordinator(FakeStore())
        with pytest.raises(LotNotFoundError):
            await coord.submit_bid("LOT-X", 10500, BidPaymentType.CARD)

    @pytest.mark.asyncio
    async def test_failed_follow_up_refresh_is_recorded(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store, retry_limit=0)
        await coord.refresh()

        def break_store():
            store.failures = 1

        store.before_bid = break_store

        lot = await coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD)

        assert lot.current_bid == 10500
        assert isinstance(coord.last_refresh_error, TransientIOError)
        assert coord.get_view("LOT-1").current_bid == 10500

    @pytest.mark.asyncio
    async def test_slow_refresh_cannot_roll_back_bid(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store)
        await coord.refresh()

        gate = store.gate = asyncio.Event()
        slow = asyncio.create_task(coord.refresh())
        await asyncio.sleep(0.01)  # slow refresh holds the pre-bid catalog

        await coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD)
        gate.set()
        await slow

        assert coord.get_view("LOT-1").current_bid == 10500

    @pytest.mark.asyncio
    async def test_submit_draft(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store)
        await coord.refresh()
        coord.open_draft("LOT-1")
        coord.adjust_draft("LOT-1", 200)

        await coord.submit_draft("LOT-1", BidPaymentType.PAYPAL)

        assert store.bid_calls == [("LOT-1", 10000, 10700)]
        assert coord.get_view("LOT-1").draft_bid is None


class TestDraft:
    @pytest.mark.asyncio
    async def test_open_seeds_minimum(self):
        coord = _coordinator(FakeStore(_make_lot()))
        await coord.refresh()

        assert coord.open_draft("LOT-1") == 10500

    @pytest.mark.asyncio
    async def test_adjust_clamps_to_minimum(self):
        coord = _coordinator(FakeStore(_make_lot()))
        await coord.refresh()
        coord.open_draft("LOT-1")

        assert coord.adjust_draft("LOT-1", -1000) == 10500
        assert coord.adjust_draft("LOT-1", 100) == 10600
        assert coord.adjust_draft("LOT-1", -50) == 10550

    @pytest.mark.asyncio
    async def test_placeholder_has_no_draft(self):
        coord = _coordinator(FakeStore())
        await coord.refresh()

        with pytest.raises(InactiveLotError):
            coord.open_draft("placeholder-0")


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        store = FakeStore(_make_lot(time_left_seconds=100))
        coord = _coordinator(store)

        coord.start()
        assert coord.running
        await asyncio.sleep(0.05)
        await coord.stop()

        assert not coord.running
        assert store.fetch_calls >= 1
        calls = store.fetch_calls
        await asyncio.sleep(0.03)
        assert store.fetch_calls == calls

    @pytest.mark.asyncio
    async def test_refresh_loop_survives_errors(self):
        store = FakeStore(_make_lot())
        store.failures = 1000
        coord = _coordinator(store, retry_limit=0)

        async with coord:
            await asyncio.sleep(0.05)

        assert store.fetch_calls >= 2
        assert isinstance(coord.last_refresh_error, TransientIOError)

    @pytest.mark.asyncio
    async def test_stop_lets_in_flight_bid_finish(self):
        store = FakeStore(_make_lot())
        coord = _coordinator(store, refresh_interval=10.0)
        await coord.refresh()
        coord.start()
        store.bid_gate = asyncio.Event()

        bid = asyncio.create_task(coord.submit_bid("LOT-1", 10500, BidPaymentType.CARD))
        await asyncio.sleep(0.01)
        await coord.stop()
        store.bid_gate.set()
        lot = await bid

        assert lot.current_bid == 10500


class TestSessionContext:
    def test_repr_hides_token(self):
        assert "token-abc" not in repr(SESSION)
