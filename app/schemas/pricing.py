from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from app.enums.discounts import DiscountSource, DiscountType


class AppliedDiscount(BaseModel):
    type: DiscountType
    value: Decimal
    # total amount saved across the whole order
    amount: Decimal
    source: DiscountSource
    promotion_id: Optional[str] = None


class PriceBreakdown(BaseModel):
    product_id: str
    currency: str
    base_price: Decimal
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    discount: Optional[AppliedDiscount] = None


class PricingResponse(PriceBreakdown):
    calculated_in_ms: float
