# app/api/routes/services.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.db.models.service import Service
from app.schemas.common import MessageResponse
from app.schemas.service import ServiceCreate, ServiceUpdate, ServiceResponse
from app.core.security import require_user_type
from app.db.models.user import User
from app.services import providers as provider_service


router = APIRouter(prefix="/services", tags=["services"])

provider_only = require_user_type("provider")

# Provider creates service

@router.post("/provider/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    service_data: ServiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only)
):
    return provider_service.create_service(db, current_user, service_data.model_dump())


# Provider views their services

@router.get("/provider/services", response_model=list[ServiceResponse])
def get_my_services(
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only)
):
    provider = provider_service.get_my_provider(db, current_user)
    return db.query(Service).filter(Service.provider_id == provider.id).all()


# Provider updates their service

@router.put("/provider/services/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: int,
    update_data: ServiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only)
):
    return provider_service.update_service(db, current_user, service_id, update_data.model_dump(exclude_unset=True))


# Provider deletes their service (soft)

@router.delete("/provider/services/{service_id}", response_model=MessageResponse)
def delete_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(provider_only)
):
    provider_service.deactivate_service(db, current_user, service_id)
    return {"message": "Service deactivated successfully"}


# Get services by category

@router.get("/category/{category_id}", response_model=list[ServiceResponse])
def get_services_by_category(category_id: int, db: Session = Depends(get_db)):
    services = (
        db.query(Service)
        .filter(Service.category_id == category_id, Service.is_active == True)  # noqa: E712
        .all()
    )
    return services


# Get services by provider

@router.get("/providers/{provider_id}", response_model=list[ServiceResponse])
def get_provider_services(provider_id: int, db: Session = Depends(get_db)):
    services = (
        db.query(Service)
        .filter(Service.provider_id == provider_id, Service.is_active == True)  # noqa: E712
        .all()
    )
    return services
