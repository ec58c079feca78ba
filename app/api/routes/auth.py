import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.db.base import get_db, transaction
from app.db.models.user import User
from app.schemas.auth import ChangePasswordRequest, LoginRequest, RefreshRequest, TokenResponse
from app.schemas.common import MessageResponse
from app.schemas.user import UserCreate, UserResponse
from app.core.exceptions import ConflictError, ValidationError
from app.core.rate_limit import strict_limit
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_user,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _tokens(user: User) -> TokenResponse:
    return TokenResponse(
        user=UserResponse.model_validate(user),
        access_token=create_access_token(user.id),
        refresh_token=create_refresh_token(user.id),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@strict_limit
def register(request: Request, user: UserCreate, db: Session = Depends(get_db)):
    if not user.gdpr_consent:
        raise ValidationError("GDPR consent is required")

    email = user.email.lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise ConflictError("Email already registered")

    new_user = User(
        email=email,
        name=user.name,
        phone=user.phone,
        user_type=user.user_type,
        gdpr_consent=user.gdpr_consent,
        password_hash=hash_password(user.password),
    )

    with transaction(db, "Email already registered"):
        db.add(new_user)

    logger.info("registered %s user %s", new_user.user_type, new_user.id)
    return _tokens(new_user)


@router.post("/login", response_model=TokenResponse)
@strict_limit
def login(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == credentials.email.lower()).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning("failed login for %s", credentials.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return _tokens(user)


@router.post("/refresh", response_model=TokenResponse)
@strict_limit
def refresh(request: Request, payload: RefreshRequest, db: Session = Depends(get_db)):
    user_id = decode_token(payload.refresh_token, token_type="refresh")
    user = db.get(User, user_id) if user_id is not None else None
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    return _tokens(user)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/change-password", response_model=MessageResponse)
@strict_limit
def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, current_user.password_hash):
        raise ValidationError("Current password is incorrect")

    with transaction(db):
        current_user.password_hash = hash_password(payload.new_password)

    return {"message": "Password changed successfully"}


@router.post("/logout", response_model=MessageResponse)
def logout(current_user: User = Depends(get_current_user)):
    # tokens are stateless; the client drops them
    return {"message": "Logged out successfully"}
