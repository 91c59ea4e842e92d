"""
Appointment status lifecycle.

Statuses: pending → confirmed → in_progress → completed, plus cancelled.
completed and cancelled are terminal.

The functions here mutate the appointment in memory and raise
AppointmentTransitionError (a ValueError) when the requested edge is not
allowed, leaving the appointment untouched. Committing is the caller's job.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from ...config import OWNER_CANCELLATION_CUTOFF_HOURS
from ...models import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

DEFAULT_OWNER_CANCEL_REASON = "Cancelled by customer"
DEFAULT_ADMIN_CANCEL_REASON = "Cancelled by administrator"

# action -> statuses it may be applied from
ALLOWED_FROM = {
    "approve": {AppointmentStatus.PENDING},
    "start": {AppointmentStatus.CONFIRMED},
    "complete": {AppointmentStatus.IN_PROGRESS},
    "cancel_by_admin": {
        AppointmentStatus.PENDING,
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.IN_PROGRESS,
    },
    "cancel_by_owner": {AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED},
}


class AppointmentTransitionError(ValueError):
    """Requested status change is not allowed from the current status"""


class CancellationWindowError(AppointmentTransitionError):
    """Owner tried to cancel inside the cutoff window"""


def _require(appointment: Appointment, action: str, message: str) -> None:
    if appointment.status not in ALLOWED_FROM[action]:
        logger.warning(
            f"⚠️ Rejected {action} on appointment {appointment.id} "
            f"(status={appointment.status.value})"
        )
        raise AppointmentTransitionError(message)


def _move(appointment: Appointment, new_status: AppointmentStatus, now: datetime, actor: str):
    old_status = appointment.status
    appointment.status = new_status
    appointment.updated_at = now
    logger.info(
        f"🔄 Appointment {appointment.id}: {old_status.value} → {new_status.value} (by {actor})"
    )


def approve(
    appointment: Appointment,
    technician_id: Optional[int] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Appointment:
    _require(appointment, "approve", "Only pending appointments can be approved")
    now = now or datetime.now()
    if technician_id is not None:
        appointment.technician_id = technician_id
    if notes:
        appointment.technician_notes = notes
    appointment.approved_at = now
    _move(appointment, AppointmentStatus.CONFIRMED, now, "admin")
    return appointment


def start(appointment: Appointment, now: Optional[datetime] = None) -> Appointment:
    _require(appointment, "start", "Only confirmed appointments can be started")
    _move(appointment, AppointmentStatus.IN_PROGRESS, now or datetime.now(), "admin")
    return appointment


def complete(
    appointment: Appointment, notes: Optional[str] = None, now: Optional[datetime] = None
) -> Appointment:
    _require(appointment, "complete", "Only in-progress appointments can be completed")
    now = now or datetime.now()
    if notes:
        appointment.technician_notes = notes
    appointment.completed_at = now
    _move(appointment, AppointmentStatus.COMPLETED, now, "admin")
    return appointment


def cancel_by_admin(
    appointment: Appointment, reason: Optional[str] = None, now: Optional[datetime] = None
) -> Appointment:
    _require(
        appointment, "cancel_by_admin", "Completed or cancelled appointments cannot be cancelled"
    )
    appointment.cancellation_reason = reason or DEFAULT_ADMIN_CANCEL_REASON
    _move(appointment, AppointmentStatus.CANCELLED, now or datetime.now(), "admin")
    return appointment


def cancel_by_owner(
    appointment: Appointment, reason: Optional[str] = None, now: Optional[datetime] = None
) -> Appointment:
    """
    Cancel on behalf of the customer who booked.

    Rejected for terminal and in-progress appointments, and for any
    appointment starting within OWNER_CANCELLATION_CUTOFF_HOURS of ``now``.
    """
    _require(appointment, "cancel_by_owner", "This appointment can no longer be cancelled")
    now = now or datetime.now()
    if appointment.scheduled_at <= now + timedelta(hours=OWNER_CANCELLATION_CUTOFF_HOURS):
        logger.warning(
            f"⚠️ Owner cancellation of appointment {appointment.id} inside the "
            f"{OWNER_CANCELLATION_CUTOFF_HOURS}h window"
        )
        raise CancellationWindowError(
            f"Appointments can only be cancelled at least "
            f"{OWNER_CANCELLATION_CUTOFF_HOURS} hours in advance"
        )
    appointment.cancellation_reason = reason or DEFAULT_OWNER_CANCEL_REASON
    _move(appointment, AppointmentStatus.CANCELLED, now, f"user {appointment.user_id}")
    return appointment


def can_owner_cancel(appointment: Appointment, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now()
    return appointment.status in ALLOWED_FROM["cancel_by_owner"] and (
        appointment.scheduled_at > now + timedelta(hours=OWNER_CANCELLATION_CUTOFF_HOURS)
    )


def assign_technician(
    appointment: Appointment, technician_id: int, now: Optional[datetime] = None
) -> Appointment:
    """Set or replace the technician regardless of status"""
    appointment.technician_id = technician_id
    appointment.updated_at = now or datetime.now()
    logger.info(f"👷 Appointment {appointment.id} assigned to technician {technician_id}")
    return appointment
