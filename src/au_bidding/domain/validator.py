"""BidValidator — minimum-raise invariant and anti-snipe extension.

Checks run in order, first failure wins:
  1. lot is active (placeholders never are)      -> InactiveLotError
  2. lot is not closed (seconds left > 0)         -> InactiveLotError
  3. amount is int cents and >= 0                 -> ValidationError
  4. amount >= current_bid + min_raise            -> BidTooLowError

The lot passed in must be the one read at validation time, not a client's
cached copy. Rejection only marks the attempt; nothing else is touched.
"""

from datetime import datetime, timedelta

from src.au_bidding.domain.models import BidAttempt, BidDecision
from src.au_common.cents import is_cents
from src.au_common.enums import BidStage
from src.au_common.errors import (
    AppError,
    BidTooLowError,
    InactiveLotError,
    ValidationError,
)
from src.au_lot.domain.models import Lot

DEFAULT_ANTI_SNIPE_WINDOW = timedelta(minutes=10)


class BidValidator:
    def __init__(self, anti_snipe_window: timedelta = DEFAULT_ANTI_SNIPE_WINDOW) -> None:
        if anti_snipe_window <= timedelta(0):
            raise ValueError("anti_snipe_window must be positive")
        self._window = anti_snipe_window

    @property
    def anti_snipe_window(self) -> timedelta:
        return self._window

    def check(self, attempt: BidAttempt, lot: Lot, now: datetime) -> BidDecision:
        """Accept or reject ``attempt`` against ``lot`` as of ``now``.

        Moves the attempt to ACCEPTED and returns the decision, or moves it
        to REJECTED and raises the typed error.
        """
        try:
            decision = self._check(attempt, lot, now)
        except AppError as exc:
            attempt.stage = BidStage.REJECTED
            attempt.rejection = exc.message
            raise
        attempt.stage = BidStage.ACCEPTED
        return decision

    def _check(self, attempt: BidAttempt, lot: Lot, now: datetime) -> BidDecision:
        if lot.is_placeholder or not lot.is_active:
            raise InactiveLotError(lot.id, "inactive")
        if lot.seconds_left(now) <= 0:
            raise InactiveLotError(lot.id, "closed")

        if not is_cents(attempt.amount):
            raise ValidationError(
                f"Bid amount must be a whole number of cents, got {attempt.amount!r}"
            )
        amount: int = attempt.amount  # type: ignore[assignment]
        if amount < 0:
            raise ValidationError(f"Bid amount must be non-negative, got {amount}")
        if amount < lot.minimum_bid:
            raise BidTooLowError(amount, lot.minimum_bid)

        closes_at, extended = self.extended_close(lot, now)
        return BidDecision(
            lot_id=lot.id,
            expected_current_bid=lot.current_bid,
            new_bid=amount,
            closes_at=closes_at,
            extended=extended,
        )

    def extended_close(self, lot: Lot, now: datetime) -> tuple[datetime, bool]:
        """Closing time after a bid accepted at ``now``.

        Inside the window the lot closes exactly one window after ``now``;
        outside it closes_at is unchanged. Never shrinks, never stacks.
        """
        closes_at = lot.closes_at or now
        if closes_at - now < self._window:
            return now + self._window, True
        return closes_at, False
