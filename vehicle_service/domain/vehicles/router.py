"""Vehicle router - FastAPI endpoints for a customer's vehicles"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User, Vehicle
from ...services.file_storage import image_url
from ..appointments.presenters import to_brief
from .schemas import (
    VehicleCreate,
    VehicleDetailResponse,
    VehicleListResponse,
    VehicleResponse,
    VehicleUpdate,
)
from .service import VehicleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


def get_vehicle_service(db: Session = Depends(get_db)) -> VehicleService:
    """Dependency injection for VehicleService"""
    return VehicleService(db)


def to_response(vehicle: Vehicle, counts: Optional[dict] = None) -> VehicleResponse:
    return VehicleResponse(
        id=vehicle.id,
        license_plate=vehicle.license_plate,
        brand=vehicle.brand,
        model=vehicle.model,
        year=vehicle.year,
        color=vehicle.color,
        mileage=vehicle.mileage,
        fuel_type=vehicle.fuel_type,
        image_url=image_url(vehicle.image_key),
        notes=vehicle.notes,
        vehicle_info=vehicle.vehicle_info,
        is_active=vehicle.is_active,
        created_at=vehicle.created_at,
        **(counts or {}),
    )


@router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    search: Optional[str] = Query(None, max_length=50),
    current_user: User = Depends(get_current_user),
    service: VehicleService = Depends(get_vehicle_service),
):
    """Active vehicles of the current user, optionally filtered by plate, brand or model"""
    vehicles = service.list_vehicles(current_user, search)
    counts = service.appointment_counts(vehicles)
    return VehicleListResponse(
        vehicles=[to_response(v, counts.get(v.id)) for v in vehicles],
        total_count=len(vehicles),
        search=search,
    )


@router.get("/{vehicle_id}", response_model=VehicleDetailResponse)
async def get_vehicle(
    vehicle_id: int,
    current_user: User = Depends(get_current_user),
    service: VehicleService = Depends(get_vehicle_service),
):
    vehicle = service.get_vehicle(vehicle_id, current_user)
    counts = service.appointment_counts([vehicle]).get(vehicle.id)
    return VehicleDetailResponse(
        **to_response(vehicle, counts).model_dump(),
        recent_appointments=[to_brief(a) for a in service.recent_appointments(vehicle)],
    )


@router.post("", response_model=VehicleResponse, status_code=201)
async def create_vehicle(
    data: VehicleCreate,
    current_user: User = Depends(get_current_user),
    service: VehicleService = Depends(get_vehicle_service),
):
    return to_response(service.create_vehicle(data, current_user))


@router.put("/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    current_user: User = Depends(get_current_user),
    service: VehicleService = Depends(get_vehicle_service),
):
    return to_response(service.update_vehicle(vehicle_id, data, current_user))


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: int,
    current_user: User = Depends(get_current_user),
    service: VehicleService = Depends(get_vehicle_service),
):
    return service.delete_vehicle(vehicle_id, current_user)


@router.post("/{vehicle_id}/image", response_model=VehicleResponse)
async def upload_vehicle_image(
    vehicle_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    service: VehicleService = Depends(get_vehicle_service),
):
    return to_response(await service.upload_image(vehicle_id, file, current_user))
