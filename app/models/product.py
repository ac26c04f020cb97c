import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, Numeric, String

from app.database.connection import CatalogBase


class Product(CatalogBase):
    """Product listing document.

    ``company_id`` references the identity store and is only checked at
    write time. ``category_primary``/``category_secondary`` are snapshots of
    the category names taken at creation and are not kept in sync.
    """

    __tablename__ = "catalog_products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String(36), nullable=False, index=True)
    sku = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    short_description = Column(String, nullable=True)
    barcode = Column(String, nullable=True)

    # category
    category_primary = Column(String, nullable=False, index=True)
    category_secondary = Column(String, nullable=True)
    tags = Column(JSON, default=list)

    # pricing
    base_price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String, default="USD")
    # e.g. [{"min_quantity": 50, "discount": "5", "discount_type": "percentage"}]
    bulk_pricing = Column(JSON, default=list)
    min_order_qty = Column(Integer, default=1, nullable=False)
    max_order_qty = Column(Integer, nullable=True)

    # inventory
    available = Column(Integer, default=0, nullable=False)
    reserved = Column(Integer, default=0, nullable=False)
    reorder_level = Column(Integer, default=10, nullable=False)
    inventory_updated_at = Column(DateTime, default=datetime.utcnow)

    # visibility
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    visible_to = Column(JSON, default=lambda: ["all"])
    regions = Column(JSON, default=lambda: ["all"])

    specifications = Column(JSON, default=dict)
    media = Column(JSON, default=dict)

    # seo
    slug = Column(String, index=True, nullable=False)
    meta_title = Column(String, nullable=True)
    meta_description = Column(String, nullable=True)
    keywords = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def stock_quantity(self) -> int:
        return int(self.available or 0)
