# app/api/routes/users.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.base import get_db, transaction
from app.db.models.user import User
from app.schemas.user import UserPublic, UserResponse, UserUpdate
from app.core.exceptions import NotFoundError
from app.core.security import get_current_user
from app.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", response_model=UserResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserResponse)
def update_profile(
    update_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    with transaction(db):
        for field, value in update_data.model_dump(exclude_unset=True).items():
            setattr(current_user, field, value)
    return current_user


@router.delete("/profile", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user_service.delete_user(db, current_user)


@router.get("/{user_id}", response_model=UserPublic)
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user
