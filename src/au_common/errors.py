"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Role
  2xxx: Lot/Bid
  3xxx: Pricing/Message
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/Role ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class AuthorizationError(AppError):
    def __init__(self, detail: str = "Action requires a role the caller lacks") -> None:
        super().__init__(1002, detail, 403)


class AccountBannedError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Account is banned", 403)


# --- 2xxx: Lot/Bid ---

class ValidationError(AppError):
    """Missing or invalid input. Subclasses keep their own code."""

    def __init__(self, detail: str, code: int = 2001) -> None:
        super().__init__(code, detail, 422)


class BidTooLowError(ValidationError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(
            f"Bid too low: {amount} cents, minimum acceptable is {minimum} cents",
            code=2002,
        )
        self.amount = amount
        self.minimum = minimum


class StaleBidError(AppError):
    """Lost the compare-and-set race; refresh and retry."""

    def __init__(self, lot_id: str) -> None:
        super().__init__(2003, f"Bid lost a concurrent update on lot {lot_id}, refresh and retry", 409)


class InactiveLotError(AppError):
    def __init__(self, lot_id: str, reason: str = "inactive") -> None:
        super().__init__(2004, f"Lot {lot_id} is {reason}", 422)
        self.reason = reason


class LotNotFoundError(AppError):
    def __init__(self, lot_id: str) -> None:
        super().__init__(2005, f"Lot not found: {lot_id}", 404)


# --- 3xxx: Pricing/Message ---

class OptionNotFoundError(AppError):
    def __init__(self, option_id: str) -> None:
        super().__init__(3001, f"Pricing option not found: {option_id}", 404)


class PriceMismatchError(ValidationError):
    def __init__(self, declared: int, computed: int) -> None:
        super().__init__(
            f"Declared total {declared} cents does not match computed total {computed} cents",
            code=3003,
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransientIOError(AppError):
    """Store unreachable or timed out. Safe to retry with backoff."""

    def __init__(self, detail: str = "Lot store unavailable") -> None:
        super().__init__(9003, detail, 503)


# Used by HttpLotStore to turn an error envelope back into the typed error.
_ERRORS_BY_CODE: dict[int, type[AppError]] = {
    1001: InvalidCredentialsError,
    1002: AuthorizationError,
    1003: AccountBannedError,
    2001: ValidationError,
    2002: BidTooLowError,
    2003: StaleBidError,
    2004: InactiveLotError,
    2005: LotNotFoundError,
    3001: OptionNotFoundError,
    3003: PriceMismatchError,
    9001: RateLimitError,
    9002: InternalError,
    9003: TransientIOError,
}


def error_from_code(code: int, message: str, http_status: int) -> AppError:
    """Rebuild a typed AppError from a response envelope.

    The server's message is kept verbatim; subclass-specific attributes
    (e.g. BidTooLowError.minimum) are not reconstructed.
    """
    cls = _ERRORS_BY_CODE.get(code, AppError)
    err = cls.__new__(cls)
    AppError.__init__(err, code, message, http_status)
    return err
