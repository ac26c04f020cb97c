import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from app.database.connection import IdentityBase


class Promotion(IdentityBase):
    __tablename__ = "promotions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    type = Column(String, nullable=False)  # PERCENTAGE_DISCOUNT / FIXED_AMOUNT_DISCOUNT
    value = Column(Numeric(12, 2), nullable=False)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    products = relationship(
        "PromotionProduct",
        back_populates="promotion",
        cascade="all, delete-orphan",
    )

    @property
    def product_ids(self) -> list:
        return [link.product_id for link in self.products]

    def is_running(self, now: datetime) -> bool:
        """Active flag set and ``now`` inside ``[start_date, end_date)``."""
        return bool(self.is_active) and self.start_date <= now < self.end_date


class PromotionProduct(IdentityBase):
    __tablename__ = "promotion_products"

    id = Column(Integer, primary_key=True, index=True)
    promotion_id = Column(
        String(36), ForeignKey("promotions.id"), nullable=False, index=True
    )
    product_id = Column(String(36), nullable=False, index=True)  # catalog product id
    promotion = relationship("Promotion", back_populates="products")
