"""Dashboard repository - aggregate queries over appointments"""

from datetime import date, time
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload

from ...models import (
    OPEN_STATUSES,
    Appointment,
    AppointmentStatus,
    ServiceType,
    Technician,
    User,
    Vehicle,
)

_COMPLETED = Appointment.status == AppointmentStatus.COMPLETED


class DashboardRepository:
    """Repository for reporting queries"""

    @staticmethod
    def entity_totals(db: Session) -> dict:
        return {
            "total_users": db.query(func.count(User.id)).scalar(),
            "total_vehicles": db.query(func.count(Vehicle.id))
            .filter(Vehicle.is_active.is_(True))
            .scalar(),
            "total_appointments": db.query(func.count(Appointment.id)).scalar(),
            "total_technicians": db.query(func.count(Technician.id))
            .filter(Technician.is_active.is_(True))
            .scalar(),
            "total_service_types": db.query(func.count(ServiceType.id))
            .filter(ServiceType.is_active.is_(True))
            .scalar(),
        }

    @staticmethod
    def status_counts(db: Session) -> dict[AppointmentStatus, int]:
        rows = (
            db.query(Appointment.status, func.count(Appointment.id))
            .group_by(Appointment.status)
            .all()
        )
        counts = {status: 0 for status in AppointmentStatus}
        counts.update(dict(rows))
        return counts

    @staticmethod
    def window_summary(
        db: Session,
        start: date,
        end: date,
        status: Optional[AppointmentStatus] = None,
        service_type_id: Optional[int] = None,
        technician_id: Optional[int] = None,
    ) -> dict:
        """Counts and completed revenue for appointments dated within [start, end]"""
        query = (
            db.query(
                func.count(Appointment.id),
                func.sum(case((_COMPLETED, 1), else_=0)),
                func.sum(case((Appointment.status == AppointmentStatus.CANCELLED, 1), else_=0)),
                func.sum(case((Appointment.status == AppointmentStatus.PENDING, 1), else_=0)),
                func.sum(case((_COMPLETED, ServiceType.price), else_=0)),
            )
            .join(ServiceType, Appointment.service_type_id == ServiceType.id)
            .filter(Appointment.appointment_date >= start, Appointment.appointment_date <= end)
        )
        if status is not None:
            query = query.filter(Appointment.status == status)
        if service_type_id is not None:
            query = query.filter(Appointment.service_type_id == service_type_id)
        if technician_id is not None:
            query = query.filter(Appointment.technician_id == technician_id)

        total, completed, cancelled, pending, revenue = query.one()
        return {
            "total": total or 0,
            "completed": int(completed or 0),
            "cancelled": int(cancelled or 0),
            "pending": int(pending or 0),
            "revenue": float(revenue or 0),
        }

    @staticmethod
    def daily_summary(db: Session, start: date, end: date) -> dict[date, dict]:
        rows = (
            db.query(
                Appointment.appointment_date,
                func.count(Appointment.id),
                func.sum(case((_COMPLETED, 1), else_=0)),
                func.sum(case((_COMPLETED, ServiceType.price), else_=0)),
            )
            .join(ServiceType, Appointment.service_type_id == ServiceType.id)
            .filter(Appointment.appointment_date >= start, Appointment.appointment_date <= end)
            .group_by(Appointment.appointment_date)
            .all()
        )
        return {
            day: {"count": count, "completed": int(completed or 0), "revenue": float(revenue or 0)}
            for day, count, completed, revenue in rows
        }

    @staticmethod
    def service_type_breakdown(
        db: Session, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[dict]:
        query = db.query(
            ServiceType.id,
            ServiceType.name,
            ServiceType.color_code,
            func.count(Appointment.id).label("appointment_count"),
            func.sum(case((_COMPLETED, ServiceType.price), else_=0)),
        ).join(Appointment, Appointment.service_type_id == ServiceType.id)
        if start is not None:
            query = query.filter(Appointment.appointment_date >= start)
        if end is not None:
            query = query.filter(Appointment.appointment_date <= end)

        rows = (
            query.group_by(ServiceType.id, ServiceType.name, ServiceType.color_code)
            .order_by(func.count(Appointment.id).desc(), ServiceType.name)
            .all()
        )
        return [
            {
                "service_type_id": service_type_id,
                "service_name": name,
                "appointment_count": count,
                "total_revenue": float(revenue or 0),
                "color_code": color_code,
            }
            for service_type_id, name, color_code, count, revenue in rows
        ]

    @staticmethod
    def _with_relations(db: Session):
        return db.query(Appointment).options(
            joinedload(Appointment.user),
            joinedload(Appointment.vehicle),
            joinedload(Appointment.service_type),
            joinedload(Appointment.technician),
        )

    @staticmethod
    def recent_appointments(db: Session, limit: int = 10) -> list[Appointment]:
        return (
            DashboardRepository._with_relations(db)
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def upcoming_today(db: Session, today: date, after: time, limit: int = 5) -> list[Appointment]:
        return (
            DashboardRepository._with_relations(db)
            .filter(
                Appointment.appointment_date == today,
                Appointment.appointment_time >= after,
                Appointment.status.in_(OPEN_STATUSES),
            )
            .order_by(Appointment.appointment_time)
            .limit(limit)
            .all()
        )

    @staticmethod
    def user_summary(db: Session, user_id: int) -> dict:
        vehicle_count = (
            db.query(func.count(Vehicle.id))
            .filter(Vehicle.user_id == user_id, Vehicle.is_active.is_(True))
            .scalar()
        )
        total, completed = (
            db.query(func.count(Appointment.id), func.sum(case((_COMPLETED, 1), else_=0)))
            .filter(Appointment.user_id == user_id)
            .one()
        )
        return {
            "total_vehicles": vehicle_count,
            "total_appointments": total or 0,
            "completed_appointments": int(completed or 0),
        }

    @staticmethod
    def user_upcoming(db: Session, user_id: int, today: date, limit: int = 5) -> list[Appointment]:
        return (
            DashboardRepository._with_relations(db)
            .filter(
                Appointment.user_id == user_id,
                Appointment.appointment_date >= today,
                Appointment.status.in_(OPEN_STATUSES),
            )
            .order_by(Appointment.appointment_date, Appointment.appointment_time)
            .limit(limit)
            .all()
        )
