"""Vehicle repository - Database operations for vehicles"""

from typing import Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session, joinedload

from ...models import OPEN_STATUSES, Appointment, AppointmentStatus, Vehicle


class VehicleRepository:
    """Repository for vehicle database operations"""

    @staticmethod
    def get_user_vehicles(db: Session, user_id: int, search: Optional[str] = None) -> list[Vehicle]:
        """Active vehicles of a user, newest first"""
        query = db.query(Vehicle).filter(Vehicle.user_id == user_id, Vehicle.is_active.is_(True))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Vehicle.license_plate.ilike(pattern),
                    Vehicle.brand.ilike(pattern),
                    Vehicle.model.ilike(pattern),
                )
            )
        return query.order_by(Vehicle.created_at.desc(), Vehicle.id.desc()).all()

    @staticmethod
    def get_user_vehicle(db: Session, vehicle_id: int, user_id: int) -> Optional[Vehicle]:
        return (
            db.query(Vehicle)
            .filter(
                Vehicle.id == vehicle_id,
                Vehicle.user_id == user_id,
                Vehicle.is_active.is_(True),
            )
            .first()
        )

    @staticmethod
    def plate_exists(db: Session, normalized_plate: str, exclude_id: Optional[int] = None) -> bool:
        """Whether an active vehicle already uses the plate"""
        query = db.query(Vehicle.id).filter(
            Vehicle.license_plate_normalized == normalized_plate,
            Vehicle.is_active.is_(True),
        )
        if exclude_id is not None:
            query = query.filter(Vehicle.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def appointment_counts(db: Session, vehicle_ids: list[int]) -> dict[int, dict]:
        """Total, completed and open (pending or confirmed) counts per vehicle"""
        if not vehicle_ids:
            return {}
        rows = (
            db.query(
                Appointment.vehicle_id,
                func.count(Appointment.id),
                func.sum(case((Appointment.status == AppointmentStatus.COMPLETED, 1), else_=0)),
                func.sum(
                    case(
                        (
                            Appointment.status.in_(
                                [AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED]
                            ),
                            1,
                        ),
                        else_=0,
                    )
                ),
            )
            .filter(Appointment.vehicle_id.in_(vehicle_ids))
            .group_by(Appointment.vehicle_id)
            .all()
        )
        return {
            vehicle_id: {
                "total_appointments": total,
                "completed_appointments": int(completed or 0),
                "open_appointments": int(open_count or 0),
            }
            for vehicle_id, total, completed, open_count in rows
        }

    @staticmethod
    def recent_appointments(db: Session, vehicle_id: int, limit: int = 5) -> list[Appointment]:
        return (
            db.query(Appointment)
            .options(
                joinedload(Appointment.service_type),
                joinedload(Appointment.technician),
                joinedload(Appointment.vehicle),
            )
            .filter(Appointment.vehicle_id == vehicle_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def has_open_appointments(db: Session, vehicle_id: int) -> bool:
        return (
            db.query(Appointment.id)
            .filter(Appointment.vehicle_id == vehicle_id, Appointment.status.in_(OPEN_STATUSES))
            .first()
            is not None
        )

    @staticmethod
    def create(db: Session, user_id: int, **data) -> Vehicle:
        vehicle = Vehicle(user_id=user_id, is_active=True, **data)
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle

    @staticmethod
    def update(db: Session, vehicle: Vehicle, **updates) -> Vehicle:
        for key, value in updates.items():
            if value is not None and hasattr(vehicle, key):
                setattr(vehicle, key, value)
        db.commit()
        db.refresh(vehicle)
        return vehicle
