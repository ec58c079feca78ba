# app/api/routes/categories.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.db.models.category import Category
from app.schemas.category import CategoryResponse
from app.core.exceptions import NotFoundError
from app.core.rate_limit import relaxed_limit

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
@relaxed_limit
def list_categories(request: Request, db: Session = Depends(get_db)):
    return db.query(Category).filter(Category.is_active == True).order_by(Category.name_de).all()  # noqa: E712


@router.get("/{slug}", response_model=CategoryResponse)
@relaxed_limit
def get_category(request: Request, slug: str, db: Session = Depends(get_db)):
    category = db.query(Category).filter(Category.slug == slug).first()
    if not category:
        raise NotFoundError("Category not found")
    return category
