from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.database.connection import get_identity_db
from app.dependencies.auth import require_auth
from app.models.user import User
from app.schemas.user import RefreshRequest, RegisterRequest, Token, UserResponse
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=UserResponse, status_code=201)
def register_user(data: RegisterRequest, db: Session = Depends(get_identity_db)):
    user = auth_service.register(db, data)
    return auth_service.to_response(user)


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_identity_db),
):
    # OAuth2 form field "username" carries the account email
    return auth_service.login(db, form_data.username, form_data.password)


@router.post("/refresh", response_model=Token)
def refresh_token(body: RefreshRequest, db: Session = Depends(get_identity_db)):
    return auth_service.refresh(db, body.refresh_token)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(require_auth)):
    return auth_service.to_response(user)
