"""Admin request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.au_lot.application.schemas import BidOut, LotOut


def _require_tz(v: datetime | None) -> datetime | None:
    if v is not None and v.tzinfo is None:
        raise ValueError("closes_at must include a timezone offset")
    return v


class CreateLotRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    starting_bid_cents: int = Field(0, ge=0)
    min_raise_cents: int = Field(gt=0)
    closes_at: datetime
    image_url: str | None = None
    sort_order: int = 0
    is_active: bool = True

    @field_validator("closes_at")
    @classmethod
    def closes_at_has_tz(cls, v: datetime | None) -> datetime | None:
        return _require_tz(v)


class UpdateLotRequest(BaseModel):
    """Partial update. current_bid is not editable: it only moves through bids."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    min_raise_cents: int | None = Field(None, gt=0)
    closes_at: datetime | None = None
    image_url: str | None = None
    sort_order: int | None = None

    @field_validator("closes_at")
    @classmethod
    def closes_at_has_tz(cls, v: datetime | None) -> datetime | None:
        return _require_tz(v)

    def to_fields(self) -> dict[str, object]:
        data = self.model_dump(exclude_unset=True)
        if "min_raise_cents" in data:
            data["min_raise"] = data.pop("min_raise_cents")
        return data


class SetActiveRequest(BaseModel):
    is_active: bool


class FinishLotResponse(BaseModel):
    lot: LotOut
    winner: BidOut | None


class CreateOptionRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    base_cost_cents: int = Field(ge=0)
    description: str | None = None
    sort_order: int = 0


class UpdateOptionRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    base_cost_cents: int | None = Field(None, ge=0)
    description: str | None = None
    sort_order: int | None = None

    def to_fields(self) -> dict[str, object]:
        data = self.model_dump(exclude_unset=True)
        if "base_cost_cents" in data:
            data["base_cost"] = data.pop("base_cost_cents")
        return data
