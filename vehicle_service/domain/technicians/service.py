"""Technician service - Business logic for workshop staff"""

import logging
from datetime import date, time

from fastapi import HTTPException, UploadFile
from sqlalchemy.orm import Session

from ...models import Appointment, Technician
from ...services import file_storage
from ...shared.soft_delete import delete_or_deactivate
from ..appointments.availability import available_technicians
from .repository import TechnicianRepository
from .schemas import TechnicianCreate, TechnicianUpdate

logger = logging.getLogger(__name__)


class TechnicianService:
    """Service layer for technician business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TechnicianRepository()

    def list_all(self) -> list[Technician]:
        return self.repo.get_all(self.db)

    def list_active(self) -> list[Technician]:
        return self.repo.get_all(self.db, active_only=True)

    def get(self, technician_id: int) -> Technician:
        technician = self.repo.get_by_id(self.db, technician_id)
        if not technician:
            raise HTTPException(status_code=404, detail="Technician not found")
        return technician

    def get_appointments(self, technician_id: int) -> list[Appointment]:
        return self.repo.get_appointments(self.db, technician_id)

    def create(self, data: TechnicianCreate) -> Technician:
        technician = self.repo.create(self.db, **data.model_dump())
        logger.info(f"✅ Technician created: {technician.id} ({technician.full_name})")
        return technician

    def update(self, technician_id: int, data: TechnicianUpdate) -> Technician:
        technician = self.get(technician_id)
        updates = data.model_dump(exclude_unset=True)

        start = updates.get("work_start_time") or technician.work_start_time
        end = updates.get("work_end_time") or technician.work_end_time
        if end <= start:
            raise HTTPException(status_code=400, detail="Work end time must be after start time")

        return self.repo.update(self.db, technician, **updates)

    def toggle_active(self, technician_id: int) -> Technician:
        technician = self.get(technician_id)
        technician.is_active = not technician.is_active
        self.db.commit()
        self.db.refresh(technician)
        logger.info(f"🔁 Technician {technician.id} active={technician.is_active}")
        return technician

    def delete(self, technician_id: int) -> dict:
        """Hard delete, or deactivate when appointments reference the technician"""
        technician = self.get(technician_id)
        deactivated = delete_or_deactivate(self.db, technician, Appointment.technician_id)
        if deactivated:
            return {"message": "Technician has appointments and was deactivated", "deactivated": True}
        return {"message": "Technician deleted", "deactivated": False}

    async def upload_photo(self, technician_id: int, file: UploadFile) -> Technician:
        technician = self.get(technician_id)
        try:
            key = await file_storage.upload_image(file, "technicians")
        except file_storage.FileValidationError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        old_key = technician.image_key
        technician.image_key = key
        self.db.commit()
        self.db.refresh(technician)
        if old_key:
            file_storage.delete_file(old_key)
        return technician

    def available_for_slot(self, slot_date: date, slot_time: time) -> list[Technician]:
        return available_technicians(self.db, slot_date, slot_time)
