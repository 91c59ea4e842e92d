"""Service type repository - Database operations for the service catalog"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Appointment, ServiceType


class ServiceTypeRepository:
    """Repository for service type database operations"""

    @staticmethod
    def get_all(db: Session, active_only: bool = False) -> list[ServiceType]:
        query = db.query(ServiceType)
        if active_only:
            query = query.filter(ServiceType.is_active.is_(True))
        return query.order_by(ServiceType.sort_order, ServiceType.name).all()

    @staticmethod
    def get_by_id(db: Session, service_type_id: int) -> Optional[ServiceType]:
        return db.query(ServiceType).filter(ServiceType.id == service_type_id).first()

    @staticmethod
    def count_appointments(db: Session, service_type_id: int) -> int:
        return (
            db.query(func.count(Appointment.id))
            .filter(Appointment.service_type_id == service_type_id)
            .scalar()
        )

    @staticmethod
    def create(db: Session, **data) -> ServiceType:
        service_type = ServiceType(is_active=True, **data)
        db.add(service_type)
        db.commit()
        db.refresh(service_type)
        return service_type

    @staticmethod
    def update(db: Session, service_type: ServiceType, **updates) -> ServiceType:
        for key, value in updates.items():
            if value is not None and hasattr(service_type, key):
                setattr(service_type, key, value)
        db.commit()
        db.refresh(service_type)
        return service_type
