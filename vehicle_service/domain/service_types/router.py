"""Service type router - catalog listing and admin management"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_admin, get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    ServiceTypeCreate,
    ServiceTypeDetailResponse,
    ServiceTypeResponse,
    ServiceTypeUpdate,
)
from .service import ServiceTypeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/service-types", tags=["Service Types"])


def get_service_type_service(db: Session = Depends(get_db)) -> ServiceTypeService:
    """Dependency injection for ServiceTypeService"""
    return ServiceTypeService(db)


@router.get("", response_model=list[ServiceTypeResponse])
async def list_active_service_types(
    current_user: User = Depends(get_current_user),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    """Active catalog entries, for booking forms"""
    return service.list_active()


@router.get("/all", response_model=list[ServiceTypeResponse])
async def list_all_service_types(
    current_admin: User = Depends(get_current_admin),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    return service.list_all()


@router.get("/{service_type_id}", response_model=ServiceTypeDetailResponse)
async def get_service_type(
    service_type_id: int,
    current_admin: User = Depends(get_current_admin),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    service_type = service.get(service_type_id)
    response = ServiceTypeDetailResponse.model_validate(service_type)
    response.appointment_count = service.count_appointments(service_type_id)
    return response


@router.post("", response_model=ServiceTypeResponse, status_code=201)
async def create_service_type(
    data: ServiceTypeCreate,
    current_admin: User = Depends(get_current_admin),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    return service.create(data)


@router.put("/{service_type_id}", response_model=ServiceTypeResponse)
async def update_service_type(
    service_type_id: int,
    data: ServiceTypeUpdate,
    current_admin: User = Depends(get_current_admin),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    return service.update(service_type_id, data)


@router.post("/{service_type_id}/toggle-active", response_model=ServiceTypeResponse)
async def toggle_service_type(
    service_type_id: int,
    current_admin: User = Depends(get_current_admin),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    return service.toggle_active(service_type_id)


@router.delete("/{service_type_id}")
async def delete_service_type(
    service_type_id: int,
    current_admin: User = Depends(get_current_admin),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    """Delete an entry; entries used by appointments are deactivated instead"""
    return service.delete(service_type_id)
