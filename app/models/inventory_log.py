from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from app.database.connection import CatalogBase


class InventoryLog(CatalogBase):
    __tablename__ = "inventory_logs"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(String(36), index=True, nullable=False)
    company_id = Column(String(36), index=True, nullable=False)
    action = Column(String, nullable=False)  # add / remove / adjust
    quantity = Column(Integer, nullable=False)
    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    reason = Column(String, nullable=True)
    user_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
