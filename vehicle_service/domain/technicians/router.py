"""Technician router - admin management of workshop staff"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Technician, User
from ...services.file_storage import image_url
from ...shared.validators import parse_slot_time
from ..appointments.status_display import status_display
from .schemas import (
    TechnicianAppointmentSummary,
    TechnicianCreate,
    TechnicianDetailResponse,
    TechnicianResponse,
    TechnicianUpdate,
)
from .service import TechnicianService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/technicians", tags=["Technicians"])


def get_technician_service(db: Session = Depends(get_db)) -> TechnicianService:
    """Dependency injection for TechnicianService"""
    return TechnicianService(db)


def to_response(technician: Technician) -> TechnicianResponse:
    return TechnicianResponse(
        id=technician.id,
        first_name=technician.first_name,
        last_name=technician.last_name,
        full_name=technician.full_name,
        phone_number=technician.phone_number,
        email=technician.email,
        specialization=technician.specialization,
        experience_years=technician.experience_years,
        image_url=image_url(technician.image_key),
        work_start_time=technician.work_start_time,
        work_end_time=technician.work_end_time,
        working_hours=technician.working_hours,
        is_active=technician.is_active,
        created_at=technician.created_at,
    )


@router.get("", response_model=list[TechnicianResponse])
async def list_technicians(
    active_only: bool = Query(False),
    current_admin: User = Depends(get_current_admin),
    service: TechnicianService = Depends(get_technician_service),
):
    technicians = service.list_active() if active_only else service.list_all()
    return [to_response(t) for t in technicians]


@router.get("/available", response_model=list[TechnicianResponse])
async def list_available_technicians(
    slot_date: date = Query(..., alias="date"),
    slot_time: str = Query(..., alias="time"),
    current_admin: User = Depends(get_current_admin),
    service: TechnicianService = Depends(get_technician_service),
):
    """Active technicians free at the given date and HH:MM time"""
    try:
        parsed_time = parse_slot_time(slot_time)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return [to_response(t) for t in service.available_for_slot(slot_date, parsed_time)]


@router.get("/{technician_id}", response_model=TechnicianDetailResponse)
async def get_technician(
    technician_id: int,
    current_admin: User = Depends(get_current_admin),
    service: TechnicianService = Depends(get_technician_service),
):
    technician = service.get(technician_id)
    appointments = [
        TechnicianAppointmentSummary(
            id=a.id,
            appointment_date=a.appointment_date,
            appointment_time=a.appointment_time,
            status=status_display(a.status),
            service_type_name=a.service_type.name,
            vehicle_info=a.vehicle.vehicle_info,
        )
        for a in service.get_appointments(technician_id)
    ]
    return TechnicianDetailResponse(
        **to_response(technician).model_dump(), appointments=appointments
    )


@router.post("", response_model=TechnicianResponse, status_code=201)
async def create_technician(
    data: TechnicianCreate,
    current_admin: User = Depends(get_current_admin),
    service: TechnicianService = Depends(get_technician_service),
):
    return to_response(service.create(data))


@router.put("/{technician_id}", response_model=TechnicianResponse)
async def update_technician(
    technician_id: int,
    data: TechnicianUpdate,
    current_admin: User = Depends(get_current_admin),
    service: TechnicianService = Depends(get_technician_service),
):
    return to_response(service.update(technician_id, data))


@router.post("/{technician_id}/toggle-active", response_model=TechnicianResponse)
async def toggle_technician(
    technician_id: int,
    current_admin: User = Depends(get_current_admin),
    service: TechnicianService = Depends(get_technician_service),
):
    return to_response(service.toggle_active(technician_id))


@router.post("/{technician_id}/photo", response_model=TechnicianResponse)
async def upload_technician_photo(
    technician_id: int,
    file: UploadFile = File(...),
    current_admin: User = Depends(get_current_admin),
    service: TechnicianService = Depends(get_technician_service),
):
    return to_response(await service.upload_photo(technician_id, file))


@router.delete("/{technician_id}")
async def delete_technician(
    technician_id: int,
    current_admin: User = Depends(get_current_admin),
    service: TechnicianService = Depends(get_technician_service),
):
    """Delete a technician; technicians with appointment history are deactivated"""
    return service.delete(technician_id)
