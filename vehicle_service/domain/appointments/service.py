"""Appointment service - booking, cancellation and the admin workflow"""

import logging
import math
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import MAX_BOOKING_DAYS_AHEAD
from ...models import Appointment, AppointmentStatus, ServiceType, Technician, User, Vehicle
from ...shared.validators import parse_slot_time
from . import availability, lifecycle
from .repository import AppointmentRepository
from .schemas import AppointmentApprove, AppointmentCreate

logger = logging.getLogger(__name__)

USER_PAGE_SIZE = 10
ADMIN_PAGE_SIZE = 15


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(
        self,
        user: Optional[User] = None,
        status: Optional[AppointmentStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
    ) -> dict:
        """Page of appointments; scoped to ``user`` unless called for the admin list"""
        page_size = USER_PAGE_SIZE if user else ADMIN_PAGE_SIZE
        items, total = self.repo.search(
            self.db,
            user_id=user.id if user else None,
            status=status,
            date_from=date_from,
            date_to=date_to,
            page=page,
            page_size=page_size,
        )
        return {
            "items": items,
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": math.ceil(total / page_size) if total else 0,
        }

    def get_user_appointment(self, appointment_id: int, user: User) -> Appointment:
        appointment = self.repo.get_for_user(self.db, appointment_id, user.id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    def list_pending(self) -> list[Appointment]:
        return self.repo.get_by_status(self.db, AppointmentStatus.PENDING)

    def list_today(self) -> list[Appointment]:
        return self.repo.get_for_day(self.db, date.today())

    def available_slots(self, slot_date: date, technician_id: Optional[int] = None) -> list[str]:
        return availability.available_slots(self.db, slot_date, technician_id)

    def available_technicians(self, appointment: Appointment) -> list[Technician]:
        return availability.available_technicians(
            self.db, appointment.appointment_date, appointment.appointment_time
        )

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def create_appointment(self, data: AppointmentCreate, user: User) -> Appointment:
        """Book a pending appointment in a grid slot that still has general capacity"""
        logger.info(f"📥 Booking request from user {user.id} for {data.appointment_date} {data.appointment_time}")

        vehicle = (
            self.db.query(Vehicle)
            .filter(
                Vehicle.id == data.vehicle_id,
                Vehicle.user_id == user.id,
                Vehicle.is_active.is_(True),
            )
            .first()
        )
        if not vehicle:
            raise HTTPException(status_code=400, detail="Invalid vehicle selection")

        service_type = (
            self.db.query(ServiceType)
            .filter(ServiceType.id == data.service_type_id, ServiceType.is_active.is_(True))
            .first()
        )
        if not service_type:
            raise HTTPException(status_code=400, detail="Invalid service type selection")

        today = date.today()
        if data.appointment_date < today:
            raise HTTPException(status_code=400, detail="Appointment date cannot be in the past")
        if data.appointment_date > today + timedelta(days=MAX_BOOKING_DAYS_AHEAD):
            raise HTTPException(
                status_code=400,
                detail=f"Appointments can be booked at most {MAX_BOOKING_DAYS_AHEAD} days ahead",
            )

        try:
            slot_time = parse_slot_time(data.appointment_time)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        if not availability.is_on_grid(slot_time):
            raise HTTPException(status_code=400, detail="Please choose one of the offered time slots")

        availability.lock_slot(self.db, data.appointment_date, slot_time)
        if not availability.is_slot_available(self.db, data.appointment_date, slot_time):
            self.db.rollback()
            logger.warning(
                f"🚫 Slot {data.appointment_date} {slot_time:%H:%M} is full, booking rejected"
            )
            raise HTTPException(
                status_code=409, detail="No free capacity at this date and time"
            )

        appointment = self.repo.create(
            self.db,
            user_id=user.id,
            vehicle_id=vehicle.id,
            service_type_id=service_type.id,
            appointment_date=data.appointment_date,
            appointment_time=slot_time,
            customer_notes=data.customer_notes,
        )
        logger.info(f"✅ Appointment {appointment.id} booked by user {user.id}")
        return self.get_appointment(appointment.id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _transition(self, appointment: Appointment, action: Callable, *args) -> Appointment:
        try:
            action(appointment, *args)
        except lifecycle.AppointmentTransitionError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail=str(e)) from e
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def _get_technician(self, technician_id: int) -> Technician:
        technician = self.db.query(Technician).filter(Technician.id == technician_id).first()
        if not technician:
            raise HTTPException(status_code=404, detail="Technician not found")
        return technician

    def cancel_by_owner(
        self, appointment_id: int, user: User, reason: Optional[str] = None
    ) -> Appointment:
        appointment = self.get_user_appointment(appointment_id, user)
        return self._transition(appointment, lifecycle.cancel_by_owner, reason)

    def approve(self, appointment_id: int, data: AppointmentApprove) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        if data.technician_id is not None:
            self._get_technician(data.technician_id)
        return self._transition(appointment, lifecycle.approve, data.technician_id, data.notes)

    def start(self, appointment_id: int) -> Appointment:
        return self._transition(self.get_appointment(appointment_id), lifecycle.start)

    def complete(self, appointment_id: int, notes: Optional[str] = None) -> Appointment:
        return self._transition(self.get_appointment(appointment_id), lifecycle.complete, notes)

    def cancel_by_admin(self, appointment_id: int, reason: Optional[str] = None) -> Appointment:
        return self._transition(
            self.get_appointment(appointment_id), lifecycle.cancel_by_admin, reason
        )

    def assign_technician(self, appointment_id: int, technician_id: int) -> Appointment:
        """Attach a technician; availability is not re-checked here"""
        appointment = self.get_appointment(appointment_id)
        self._get_technician(technician_id)
        lifecycle.assign_technician(appointment, technician_id, datetime.now())
        self.db.commit()
        self.db.refresh(appointment)
        return appointment
