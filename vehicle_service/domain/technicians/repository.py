"""Technician repository - Database operations for technicians"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Technician


class TechnicianRepository:
    """Repository for technician database operations"""

    @staticmethod
    def get_all(db: Session, active_only: bool = False) -> list[Technician]:
        query = db.query(Technician)
        if active_only:
            query = query.filter(Technician.is_active.is_(True))
        return query.order_by(Technician.first_name, Technician.last_name).all()

    @staticmethod
    def get_by_id(db: Session, technician_id: int) -> Optional[Technician]:
        return db.query(Technician).filter(Technician.id == technician_id).first()

    @staticmethod
    def get_appointments(db: Session, technician_id: int) -> list[Appointment]:
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.service_type), joinedload(Appointment.vehicle))
            .filter(Appointment.technician_id == technician_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
            .all()
        )

    @staticmethod
    def create(db: Session, **data) -> Technician:
        technician = Technician(is_active=True, **data)
        db.add(technician)
        db.commit()
        db.refresh(technician)
        return technician

    @staticmethod
    def update(db: Session, technician: Technician, **updates) -> Technician:
        for key, value in updates.items():
            if value is not None and hasattr(technician, key):
                setattr(technician, key, value)
        db.commit()
        db.refresh(technician)
        return technician
