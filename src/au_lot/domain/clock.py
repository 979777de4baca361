"""LotClock — per-lot countdown between authoritative refreshes.

tick() is local prediction only; reconcile() always replaces the local
value with the store's. Nothing here ever contacts the store.
"""

from datetime import datetime

from src.au_common.datetime_utils import utc_now


class LotClock:
    __slots__ = ("time_left_seconds", "last_synced_at")

    def __init__(self, time_left_seconds: int, last_synced_at: datetime | None = None) -> None:
        self.time_left_seconds = max(time_left_seconds, 0)
        self.last_synced_at = last_synced_at

    @classmethod
    def from_server(cls, server_time_left: int, synced_at: datetime | None = None) -> "LotClock":
        """Clock for a lot seen for the first time: adopt the server value as-is."""
        return cls(server_time_left, synced_at or utc_now())

    def tick(self) -> int:
        """Advance one second, floored at 0. Returns the new value."""
        if self.time_left_seconds > 0:
            self.time_left_seconds -= 1
        return self.time_left_seconds

    def reconcile(self, server_time_left: int, synced_at: datetime | None = None) -> int:
        """Adopt the authoritative value unconditionally."""
        self.time_left_seconds = max(server_time_left, 0)
        self.last_synced_at = synced_at or utc_now()
        return self.time_left_seconds

    @property
    def expired(self) -> bool:
        return self.time_left_seconds == 0

    def __repr__(self) -> str:
        return f"LotClock(time_left_seconds={self.time_left_seconds}, last_synced_at={self.last_synced_at!r})"
