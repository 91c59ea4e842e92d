"""Build appointment response models from ORM rows"""

from datetime import datetime
from typing import Optional

from ...models import Appointment, Technician
from . import lifecycle
from .schemas import (
    AppointmentBrief,
    AppointmentResponse,
    CustomerRef,
    ServiceTypeRef,
    TechnicianRef,
    VehicleRef,
)
from .status_display import status_display


def technician_ref(technician: Optional[Technician]) -> Optional[TechnicianRef]:
    if technician is None:
        return None
    return TechnicianRef(
        id=technician.id,
        full_name=technician.full_name,
        specialization=technician.specialization,
        working_hours=technician.working_hours,
    )


def to_response(
    appointment: Appointment, include_customer: bool = False, now: Optional[datetime] = None
) -> AppointmentResponse:
    vehicle = appointment.vehicle
    service_type = appointment.service_type
    customer = None
    if include_customer:
        user = appointment.user
        customer = CustomerRef(
            id=user.id, full_name=user.full_name, email=user.email, phone_number=user.phone_number
        )

    return AppointmentResponse(
        id=appointment.id,
        appointment_date=appointment.appointment_date,
        appointment_time=f"{appointment.appointment_time:%H:%M}",
        scheduled_at=appointment.scheduled_at,
        status=status_display(appointment.status),
        customer_notes=appointment.customer_notes,
        technician_notes=appointment.technician_notes,
        cancellation_reason=appointment.cancellation_reason,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
        approved_at=appointment.approved_at,
        completed_at=appointment.completed_at,
        vehicle=VehicleRef(
            id=vehicle.id, license_plate=vehicle.license_plate, vehicle_info=vehicle.vehicle_info
        ),
        service_type=ServiceTypeRef(
            id=service_type.id,
            name=service_type.name,
            price=service_type.price,
            formatted_duration=service_type.formatted_duration,
            color_code=service_type.color_code,
        ),
        technician=technician_ref(appointment.technician),
        customer=customer,
        can_cancel=lifecycle.can_owner_cancel(appointment, now),
    )


def to_brief(appointment: Appointment, include_customer: bool = False) -> AppointmentBrief:
    technician = appointment.technician
    return AppointmentBrief(
        id=appointment.id,
        appointment_date=appointment.appointment_date,
        appointment_time=f"{appointment.appointment_time:%H:%M}",
        status=status_display(appointment.status),
        service_type_name=appointment.service_type.name,
        vehicle_info=appointment.vehicle.vehicle_info,
        technician_name=technician.full_name if technician else None,
        customer_name=appointment.user.full_name if include_customer else None,
    )
