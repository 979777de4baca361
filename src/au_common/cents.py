"""Integer arithmetic utilities for cents-based money.

All bids, raises, option costs and message totals are int (cents).
No float, no Decimal: the pricing preview and the charge must agree to the cent.
"""

CENTS_PER_DOLLAR = 100


def dollars(amount: int) -> int:
    """Whole dollars -> cents: dollars(40) -> 4000."""
    return amount * CENTS_PER_DOLLAR


def is_cents(value: object) -> bool:
    """True for a plain int amount. bool, float (incl. NaN/inf) and str are not cents."""
    return isinstance(value, int) and not isinstance(value, bool)


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"
