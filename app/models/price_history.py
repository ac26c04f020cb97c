from sqlalchemy import Column, Integer, String, Numeric, DateTime
from datetime import datetime
from app.database.connection import CatalogBase

class PriceHistory(CatalogBase):
    __tablename__ = "price_history"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(String(36), index=True, nullable=False)
    old_price = Column(Numeric(12, 2), nullable=True)
    new_price = Column(Numeric(12, 2), nullable=False)
    reason = Column(String, nullable=True)
    changed_at = Column(DateTime, default=datetime.utcnow, index=True)
