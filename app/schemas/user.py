from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from app.enums.user_roles import UserRole


class Address(BaseModel):
    street: str
    city: str
    state: str
    zip_code: str
    country: str


class RegisterRequest(BaseModel):
    user_type: UserRole
    email: EmailStr
    password: str = Field(min_length=8)
    phone: Optional[str] = None
    address: Optional[Address] = None

    # company profile
    name: Optional[str] = None
    business_registration: Optional[str] = None
    website: Optional[str] = None

    # retailer profile
    business_name: Optional[str] = None
    contact_person: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: EmailStr
    role: UserRole
    is_active: bool
    verification_status: Optional[str] = None
    created_at: datetime
    profile_id: Optional[str] = None
    display_name: Optional[str] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenData(BaseModel):
    user_id: Optional[str] = None
    role: Optional[str] = None
