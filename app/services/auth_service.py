import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, ConflictError, ValidationError
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
)
from app.enums.user_roles import UserRole
from app.models.user import Company, Retailer, User
from app.schemas.user import RegisterRequest, Token, UserResponse

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def register(db: Session, data: RegisterRequest) -> User:
    if data.user_type == UserRole.company and not data.name:
        raise ValidationError("Company name is required.")
    if data.user_type == UserRole.retailer and not (data.business_name and data.contact_person):
        raise ValidationError("Business name and contact person are required.")

    if get_user_by_email(db, data.email):
        raise ConflictError("An account with this email already exists.")

    address = data.address.model_dump() if data.address else None
    user = User(
        email=data.email.lower(),
        hashed_password=get_password_hash(data.password),
        role=data.user_type.value,
        verification_status="pending",
    )
    db.add(user)
    db.flush()

    if data.user_type == UserRole.company:
        db.add(Company(
            user_id=user.id,
            name=data.name,
            business_registration=data.business_registration,
            phone=data.phone,
            website=data.website,
            address=address,
        ))
    else:
        db.add(Retailer(
            user_id=user.id,
            business_name=data.business_name,
            contact_person=data.contact_person,
            phone=data.phone,
            address=address,
        ))

    db.commit()
    db.refresh(user)
    logger.info("registered %s account %s", user.role, user.id)
    return user


def _issue_tokens(user: User) -> Token:
    claims = {"sub": user.id, "role": user.role}
    return Token(
        access_token=create_access_token(dict(claims)),
        refresh_token=create_refresh_token(dict(claims)),
    )


def login(db: Session, email: str, password: str) -> Token:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthenticationError("Inactive user")
    return _issue_tokens(user)


def refresh(db: Session, refresh_token: str) -> Token:
    token_data = decode_refresh_token(refresh_token)
    if not token_data.user_id:
        raise AuthenticationError("Invalid or expired refresh token")

    user = get_user(db, token_data.user_id)
    if not user or not user.is_active:
        raise AuthenticationError("Invalid or expired refresh token")

    claims = {"sub": user.id, "role": user.role}
    return Token(access_token=create_access_token(claims))


def to_response(user: User) -> UserResponse:
    profile_id = None
    display_name = None
    if user.company is not None:
        profile_id, display_name = user.company.id, user.company.name
    elif user.retailer is not None:
        profile_id, display_name = user.retailer.id, user.retailer.business_name
    return UserResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        is_active=user.is_active,
        verification_status=user.verification_status,
        created_at=user.created_at,
        profile_id=profile_id,
        display_name=display_name,
    )
