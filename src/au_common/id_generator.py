"""Snowflake-style IDs for lots, bids and messages.

Time-ordered, unique within one process. ``generate_id("BID")`` ->
"BID-2209763420160000". Bid history sorts by id as a tiebreak on equal
timestamps, so ids from one process must be strictly increasing.
"""

import threading
import time

_EPOCH_MS = 1_730_000_000_000  # 2024-10-27 approx
_WORKER_BITS = 10
_SEQUENCE_BITS = 12
_SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1


class SnowflakeIdGenerator:
    """41-bit ms timestamp | 10-bit worker id | 12-bit per-ms sequence."""

    def __init__(self, worker_id: int = 0) -> None:
        if not (0 <= worker_id < (1 << _WORKER_BITS)):
            raise ValueError(f"worker_id must be 0-{(1 << _WORKER_BITS) - 1}")
        self._worker_id = worker_id
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            now_ms = int(time.time() * 1000)
            if now_ms < self._last_ms:
                # Clock stepped backwards: keep issuing from the last timestamp.
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & _SEQUENCE_MASK
                if self._sequence == 0:
                    while now_ms <= self._last_ms:
                        now_ms = int(time.time() * 1000)
            else:
                self._sequence = 0
            self._last_ms = now_ms
            return (
                ((now_ms - _EPOCH_MS) << (_WORKER_BITS + _SEQUENCE_BITS))
                | (self._worker_id << _SEQUENCE_BITS)
                | self._sequence
            )


_default_generator = SnowflakeIdGenerator()


def generate_id(prefix: str | None = None) -> str:
    """Next id from the module-level generator, optionally prefixed."""
    value = str(_default_generator.next_int())
    return f"{prefix}-{value}" if prefix else value
