"""Pydantic schemas for pricing options, previews and message submissions."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.au_common.cents import cents_to_display
from src.au_common.enums import MessagePaymentMethod
from src.au_pricing.domain.models import Message, MessageCharge, PricingOption


class PricingOptionOut(BaseModel):
    id: str
    name: str
    base_cost_cents: int
    base_cost_display: str
    description: str | None
    sort_order: int

    @classmethod
    def from_domain(cls, o: PricingOption) -> "PricingOptionOut":
        return cls(
            id=o.id,
            name=o.name,
            base_cost_cents=o.base_cost,
            base_cost_display=cents_to_display(o.base_cost),
            description=o.description,
            sort_order=o.sort_order,
        )


class ChargeOut(BaseModel):
    base_cost_cents: int
    text_cost_cents: int
    quick_cost_cents: int
    video_cost_cents: int
    total_cents: int
    total_display: str

    @classmethod
    def from_charge(cls, c: MessageCharge) -> "ChargeOut":
        return cls(
            base_cost_cents=c.base_cost,
            text_cost_cents=c.text_cost,
            quick_cost_cents=c.quick_cost,
            video_cost_cents=c.video_cost,
            total_cents=c.total,
            total_display=cents_to_display(c.total),
        )


class PreviewRequest(BaseModel):
    option_id: str
    text: str = ""
    quick: bool = False
    video: bool = False


class SubmitMessageRequest(BaseModel):
    option_id: str
    text: str
    email: EmailStr
    payment_method: MessagePaymentMethod = MessagePaymentMethod.VISA
    quick: bool = False
    video: bool = False
    declared_total_cents: int = Field(ge=0)

    @field_validator("text")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class MessageOut(BaseModel):
    id: str
    option_id: str
    email: str
    payment_method: str
    quick: bool
    video: bool
    cost_cents: int
    cost_display: str
    created_at: str

    @classmethod
    def from_domain(cls, m: Message) -> "MessageOut":
        return cls(
            id=m.id,
            option_id=m.option_id,
            email=m.email,
            payment_method=m.payment_method,
            quick=m.quick,
            video=m.video,
            cost_cents=m.cost,
            cost_display=cents_to_display(m.cost),
            created_at=m.created_at.isoformat(),
        )
