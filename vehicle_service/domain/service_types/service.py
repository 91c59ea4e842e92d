"""Service type service - Business logic for the service catalog"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Appointment, ServiceType
from ...shared.soft_delete import delete_or_deactivate
from .repository import ServiceTypeRepository
from .schemas import ServiceTypeCreate, ServiceTypeUpdate

logger = logging.getLogger(__name__)


class ServiceTypeService:
    """Service layer for service type business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceTypeRepository()

    def list_all(self) -> list[ServiceType]:
        return self.repo.get_all(self.db)

    def list_active(self) -> list[ServiceType]:
        return self.repo.get_all(self.db, active_only=True)

    def get(self, service_type_id: int) -> ServiceType:
        service_type = self.repo.get_by_id(self.db, service_type_id)
        if not service_type:
            raise HTTPException(status_code=404, detail="Service type not found")
        return service_type

    def count_appointments(self, service_type_id: int) -> int:
        return self.repo.count_appointments(self.db, service_type_id)

    def create(self, data: ServiceTypeCreate) -> ServiceType:
        service_type = self.repo.create(self.db, **data.model_dump())
        logger.info(f"✅ Service type created: {service_type.id} ({service_type.name})")
        return service_type

    def update(self, service_type_id: int, data: ServiceTypeUpdate) -> ServiceType:
        service_type = self.get(service_type_id)
        return self.repo.update(self.db, service_type, **data.model_dump(exclude_unset=True))

    def toggle_active(self, service_type_id: int) -> ServiceType:
        service_type = self.get(service_type_id)
        service_type.is_active = not service_type.is_active
        self.db.commit()
        self.db.refresh(service_type)
        logger.info(f"🔁 Service type {service_type.id} active={service_type.is_active}")
        return service_type

    def delete(self, service_type_id: int) -> dict:
        """Hard delete, or deactivate when appointments reference the entry"""
        service_type = self.get(service_type_id)
        deactivated = delete_or_deactivate(self.db, service_type, Appointment.service_type_id)
        if deactivated:
            return {"message": "Service type is in use and was deactivated", "deactivated": True}
        return {"message": "Service type deleted", "deactivated": False}
