"""Tests for au_lot.domain.clock: local countdown with authoritative reconcile."""

from datetime import UTC, datetime

from src.au_lot.domain.clock import LotClock


class TestTick:
    def test_counts_down(self) -> None:
        clock = LotClock(3)
        assert clock.tick() == 2
        assert clock.tick() == 1

    def test_floors_at_zero(self) -> None:
        clock = LotClock(1)
        clock.tick()
        clock.tick()
        assert clock.time_left_seconds == 0
        assert clock.expired

    def test_negative_start_clamped(self) -> None:
        assert LotClock(-5).time_left_seconds == 0


class TestReconcile:
    def test_server_value_wins_after_drift(self) -> None:
        clock = LotClock.from_server(900)
        for _ in range(600):
            clock.tick()
        assert clock.time_left_seconds == 300

        assert clock.reconcile(450) == 450
        assert clock.time_left_seconds == 450

    def test_can_move_clock_backwards(self) -> None:
        clock = LotClock(100)
        clock.reconcile(40)
        assert clock.time_left_seconds == 40

    def test_records_sync_time(self) -> None:
        synced = datetime(2026, 5, 1, tzinfo=UTC)
        clock = LotClock(10)
        clock.reconcile(5, synced)
        assert clock.last_synced_at == synced

    def test_negative_server_value_clamped(self) -> None:
        clock = LotClock(10)
        clock.reconcile(-3)
        assert clock.time_left_seconds == 0
