from decimal import Decimal
from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

class PriceHistoryResponse(BaseModel):
    id: int
    product_id: str
    old_price: Optional[Decimal] = None
    new_price: Decimal
    reason: Optional[str] = None
    changed_at: datetime

    class Config:
        from_attributes = True

class PriceHistoryPageMeta(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int

class PriceHistoryPageResponse(BaseModel):
    items: List[PriceHistoryResponse]
    meta: PriceHistoryPageMeta
