"""Appointment repository - Database operations for appointments"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, AppointmentStatus


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def _with_relations(db: Session):
        return db.query(Appointment).options(
            joinedload(Appointment.user),
            joinedload(Appointment.vehicle),
            joinedload(Appointment.service_type),
            joinedload(Appointment.technician),
        )

    @staticmethod
    def search(
        db: Session,
        user_id: Optional[int] = None,
        status: Optional[AppointmentStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[Appointment], int]:
        """Filtered page of appointments, latest slot first, plus the total match count"""
        query = AppointmentRepository._with_relations(db)
        if user_id is not None:
            query = query.filter(Appointment.user_id == user_id)
        if status is not None:
            query = query.filter(Appointment.status == status)
        if date_from is not None:
            query = query.filter(Appointment.appointment_date >= date_from)
        if date_to is not None:
            query = query.filter(Appointment.appointment_date <= date_to)

        total = query.order_by(None).count()
        items = (
            query.order_by(
                Appointment.appointment_date.desc(),
                Appointment.appointment_time.desc(),
                Appointment.id.desc(),
            )
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return items, total

    @staticmethod
    def get_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return (
            AppointmentRepository._with_relations(db)
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def get_for_user(db: Session, appointment_id: int, user_id: int) -> Optional[Appointment]:
        return (
            AppointmentRepository._with_relations(db)
            .filter(Appointment.id == appointment_id, Appointment.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_by_status(db: Session, status: AppointmentStatus) -> list[Appointment]:
        return (
            AppointmentRepository._with_relations(db)
            .filter(Appointment.status == status)
            .order_by(Appointment.appointment_date, Appointment.appointment_time)
            .all()
        )

    @staticmethod
    def get_for_day(db: Session, day: date) -> list[Appointment]:
        return (
            AppointmentRepository._with_relations(db)
            .filter(Appointment.appointment_date == day)
            .order_by(Appointment.appointment_time)
            .all()
        )

    @staticmethod
    def create(db: Session, **data) -> Appointment:
        appointment = Appointment(status=AppointmentStatus.PENDING, **data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment
