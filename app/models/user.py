import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import relationship

from app.database.connection import IdentityBase


def _uuid() -> str:
    return str(uuid.uuid4())


class User(IdentityBase):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, index=True)  # company / retailer
    is_active = Column(Boolean, default=True, nullable=False)
    verification_status = Column(String, default="pending")
    created_at = Column(DateTime, default=datetime.utcnow)

    company = relationship("Company", back_populates="user", uselist=False)
    retailer = relationship("Retailer", back_populates="user", uselist=False)


class Company(IdentityBase):
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    name = Column(String, nullable=False)
    business_registration = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    website = Column(String, nullable=True)
    address = Column(JSON, nullable=True)
    is_verified = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="company")


class Retailer(IdentityBase):
    __tablename__ = "retailers"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    business_name = Column(String, nullable=False)
    contact_person = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="retailer")
