from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, PermissionDeniedError
from app.core.security import decode_access_token
from app.database.connection import get_identity_db
from app.enums.user_roles import UserRole
from app.models.product import Product
from app.models.user import Company, Retailer, User
from app.services.auth_service import get_user

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_identity_db),
) -> User:
    token_data = decode_access_token(token)

    if not token_data.user_id:
        raise AuthenticationError("Could not validate credentials")

    user = get_user(db, token_data.user_id)
    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("Inactive user")
    return user


def require_auth(user: User = Depends(get_current_user)) -> User:
    return user


def require_company(user: User = Depends(get_current_user)) -> Company:
    if user.role != UserRole.company.value or user.company is None:
        raise PermissionDeniedError("Only companies can perform this action")
    return user.company


def require_retailer(user: User = Depends(get_current_user)) -> Retailer:
    if user.role != UserRole.retailer.value or user.retailer is None:
        raise PermissionDeniedError("Only retailers can perform this action")
    return user.retailer


def ensure_owner(product: Product, company: Company) -> None:
    """Only the owning company may modify or deactivate a product."""
    if product.company_id != company.id:
        raise PermissionDeniedError("Unauthorized: You can only modify your own products")
