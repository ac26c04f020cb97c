from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.enums.discounts import PromotionType


def to_naive_utc(value: datetime) -> datetime:
    """Promotion windows are stored as naive UTC; offsets are folded in."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class PromotionCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    type: PromotionType
    value: Decimal = Field(gt=0)
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    product_ids: List[str] = []

    @field_validator("start_date", "end_date")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def _check_window(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        if self.type is PromotionType.percentage_discount and self.value > 100:
            raise ValueError("percentage discount cannot exceed 100")
        return self


class PromotionResponse(BaseModel):
    id: str
    company_id: str
    name: str
    description: Optional[str] = None
    type: PromotionType
    value: Decimal
    start_date: datetime
    end_date: datetime
    is_active: bool
    product_ids: List[str] = []
    created_at: datetime

    class Config:
        from_attributes = True
