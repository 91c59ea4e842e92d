"""Appointment router - a customer's own appointments"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import AppointmentStatus, User
from ...rate_limiter import booking_rate_limit, cancellation_rate_limit
from .presenters import to_response
from .schemas import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentPage,
    AppointmentResponse,
    AvailableSlotsResponse,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


@router.get("", response_model=AppointmentPage)
async def list_my_appointments(
    status: Optional[AppointmentStatus] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    result = service.search(current_user, status, date_from, date_to, page)
    result["items"] = [to_response(a) for a in result["items"]]
    return result


@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    slot_date: date = Query(..., alias="date"),
    technician_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Free HH:MM slots of a day, optionally for one technician"""
    return AvailableSlotsResponse(
        day=slot_date,
        technician_id=technician_id,
        slots=service.available_slots(slot_date, technician_id),
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_my_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.get_user_appointment(appointment_id, current_user))


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=201,
    dependencies=[Depends(booking_rate_limit)],
)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment; it starts pending until an administrator approves it"""
    return to_response(service.create_appointment(data, current_user))


@router.post(
    "/{appointment_id}/cancel",
    response_model=AppointmentResponse,
    dependencies=[Depends(cancellation_rate_limit)],
)
async def cancel_my_appointment(
    appointment_id: int,
    data: Optional[AppointmentCancel] = None,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    reason = data.reason if data else None
    return to_response(service.cancel_by_owner(appointment_id, current_user, reason))
