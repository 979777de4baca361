"""Tiered message pricing.

One function serves both the storefront preview and the authoritative
charge, so it must stay pure and table-driven: any change to the script
ranges or tiers changes what customers are charged.

All amounts are int cents.
"""

import re

from src.au_common.cents import dollars
from src.au_pricing.domain.models import MessageCharge

# CJK ideographs, Japanese kana, Hangul syllables, Thai, Georgian.
COMPLEX_SCRIPT_RANGES: tuple[tuple[int, int], ...] = (
    (0x4E00, 0x9FFF),
    (0x3040, 0x30FF),
    (0xAC00, 0xD7AF),
    (0x0E00, 0x0E7F),
    (0x10A0, 0x10FF),
)

_COMPLEX_SCRIPT_RE = re.compile(
    "[" + "".join(f"\\u{lo:04X}-\\u{hi:04X}" for lo, hi in COMPLEX_SCRIPT_RANGES) + "]"
)

MIN_TEXT_COST = dollars(40)

# Complex scripts: first 7 characters included in the minimum, $5 each after.
COMPLEX_FREE_CHARS = 7
COMPLEX_PER_CHAR = dollars(5)

# Other scripts: flat up to 18, $2/char up to 28, $5/char beyond.
SIMPLE_FLAT_CHARS = 18
SIMPLE_TIER2_CHARS = 28
SIMPLE_TIER2_PER_CHAR = dollars(2)
SIMPLE_TIER3_BASE = dollars(60)
SIMPLE_TIER3_PER_CHAR = dollars(5)

QUICK_COST = dollars(30)
VIDEO_COST = dollars(100)


def char_count(text: str) -> int:
    """Length in UTF-16 code units, the unit the browser preview counts in.

    Identical to len() for BMP text; astral characters (emoji) count as 2.
    """
    return len(text.encode("utf-16-le")) // 2


def is_complex_script(text: str) -> bool:
    """True if any character falls in one of COMPLEX_SCRIPT_RANGES."""
    return _COMPLEX_SCRIPT_RE.search(text) is not None


def text_cost(text: str) -> int:
    if not text:
        return 0
    n = char_count(text)
    if is_complex_script(text):
        return MIN_TEXT_COST + max(0, n - COMPLEX_FREE_CHARS) * COMPLEX_PER_CHAR
    if n <= SIMPLE_FLAT_CHARS:
        return MIN_TEXT_COST
    if n <= SIMPLE_TIER2_CHARS:
        return MIN_TEXT_COST + (n - SIMPLE_FLAT_CHARS) * SIMPLE_TIER2_PER_CHAR
    return SIMPLE_TIER3_BASE + (n - SIMPLE_TIER2_CHARS) * SIMPLE_TIER3_PER_CHAR


def compute_cost(text: str, base_cost: int, quick: bool, video: bool) -> MessageCharge:
    """Price a message: option base + text tier + optional quick/video add-ons."""
    return MessageCharge(
        base_cost=base_cost,
        text_cost=text_cost(text),
        quick_cost=QUICK_COST if quick else 0,
        video_cost=VIDEO_COST if video else 0,
    )
