"""Admin appointment router - triage and the service workflow"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import get_current_admin
from ...models import AppointmentStatus, User
from .presenters import technician_ref, to_brief, to_response
from .router import get_appointment_service
from .schemas import (
    AdminAppointmentDetail,
    AppointmentApprove,
    AppointmentBrief,
    AppointmentCancel,
    AppointmentComplete,
    AppointmentPage,
    AppointmentResponse,
    TechnicianAssign,
    TechnicianRef,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/appointments", tags=["Admin Appointments"])


@router.get("", response_model=AppointmentPage)
async def list_appointments(
    status: Optional[AppointmentStatus] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    result = service.search(None, status, date_from, date_to, page)
    result["items"] = [to_response(a, include_customer=True) for a in result["items"]]
    return result


@router.get("/pending", response_model=list[AppointmentBrief])
async def list_pending_appointments(
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return [to_brief(a, include_customer=True) for a in service.list_pending()]


@router.get("/today", response_model=list[AppointmentBrief])
async def list_today_appointments(
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return [to_brief(a, include_customer=True) for a in service.list_today()]


@router.get("/{appointment_id}", response_model=AdminAppointmentDetail)
async def get_appointment(
    appointment_id: int,
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointment with the technicians who could take its slot"""
    appointment = service.get_appointment(appointment_id)
    return AdminAppointmentDetail(
        **to_response(appointment, include_customer=True).model_dump(),
        available_technicians=[technician_ref(t) for t in service.available_technicians(appointment)],
    )


@router.get("/{appointment_id}/available-technicians", response_model=list[TechnicianRef])
async def get_available_technicians(
    appointment_id: int,
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.get_appointment(appointment_id)
    return [technician_ref(t) for t in service.available_technicians(appointment)]


@router.post("/{appointment_id}/approve", response_model=AppointmentResponse)
async def approve_appointment(
    appointment_id: int,
    data: Optional[AppointmentApprove] = None,
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.approve(appointment_id, data or AppointmentApprove())
    return to_response(appointment, include_customer=True)


@router.post("/{appointment_id}/start", response_model=AppointmentResponse)
async def start_appointment(
    appointment_id: int,
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.start(appointment_id), include_customer=True)


@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: int,
    data: Optional[AppointmentComplete] = None,
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    notes = data.notes if data else None
    return to_response(service.complete(appointment_id, notes), include_customer=True)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    data: Optional[AppointmentCancel] = None,
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    reason = data.reason if data else None
    return to_response(service.cancel_by_admin(appointment_id, reason), include_customer=True)


@router.post("/{appointment_id}/assign-technician", response_model=AppointmentResponse)
async def assign_technician(
    appointment_id: int,
    data: TechnicianAssign,
    current_admin: User = Depends(get_current_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.assign_technician(appointment_id, data.technician_id)
    return to_response(appointment, include_customer=True)
