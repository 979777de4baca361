"""Domain models for au_pricing: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MessageCharge:
    """Cost breakdown of one message, all int cents."""

    base_cost: int
    text_cost: int
    quick_cost: int
    video_cost: int

    @property
    def total(self) -> int:
        return self.base_cost + self.text_cost + self.quick_cost + self.video_cost


@dataclass
class PricingOption:
    id: str
    name: str
    base_cost: int  # cents
    description: str | None = None
    sort_order: int = 0


@dataclass
class Message:
    id: str
    user_id: str
    option_id: str
    text: str
    email: str
    payment_method: str  # visa / mastercard / paypal
    quick: bool
    video: bool
    cost: int  # cents, the computed total
    created_at: datetime
