"""Vehicle service - Business logic for customer vehicles"""

import logging
from typing import Optional

from fastapi import HTTPException, UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Appointment, User, Vehicle
from ...services import file_storage
from ...shared.validators import normalize_license_plate
from .repository import VehicleRepository
from .schemas import VehicleCreate, VehicleUpdate

logger = logging.getLogger(__name__)

DUPLICATE_PLATE_MESSAGE = "A vehicle with this license plate is already registered"


class VehicleService:
    """Service layer for vehicle business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = VehicleRepository()

    def list_vehicles(self, user: User, search: Optional[str] = None) -> list[Vehicle]:
        return self.repo.get_user_vehicles(self.db, user.id, search)

    def appointment_counts(self, vehicles: list[Vehicle]) -> dict[int, dict]:
        return self.repo.appointment_counts(self.db, [v.id for v in vehicles])

    def get_vehicle(self, vehicle_id: int, user: User) -> Vehicle:
        """Get one of the user's active vehicles; other users' vehicles are not found"""
        vehicle = self.repo.get_user_vehicle(self.db, vehicle_id, user.id)
        if not vehicle:
            raise HTTPException(status_code=404, detail="Vehicle not found")
        return vehicle

    def recent_appointments(self, vehicle: Vehicle) -> list[Appointment]:
        return self.repo.recent_appointments(self.db, vehicle.id)

    def _ensure_plate_free(self, plate: str, exclude_id: Optional[int] = None) -> str:
        normalized = normalize_license_plate(plate)
        if self.repo.plate_exists(self.db, normalized, exclude_id):
            logger.warning(f"⚠️ Duplicate license plate rejected: {plate}")
            raise HTTPException(status_code=400, detail=DUPLICATE_PLATE_MESSAGE)
        return normalized

    def _commit_guarded(self, write):
        # The partial unique index catches a plate registered concurrently
        try:
            return write()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=400, detail=DUPLICATE_PLATE_MESSAGE) from e

    def create_vehicle(self, data: VehicleCreate, user: User) -> Vehicle:
        logger.info(f"📥 Creating vehicle for user_id: {user.id}")
        normalized = self._ensure_plate_free(data.license_plate)
        vehicle = self._commit_guarded(
            lambda: self.repo.create(
                self.db, user.id, license_plate_normalized=normalized, **data.model_dump()
            )
        )
        logger.info(f"✅ Vehicle created: {vehicle.id} ({vehicle.license_plate})")
        return vehicle

    def update_vehicle(self, vehicle_id: int, data: VehicleUpdate, user: User) -> Vehicle:
        vehicle = self.get_vehicle(vehicle_id, user)
        updates = data.model_dump(exclude_unset=True)
        if updates.get("license_plate"):
            updates["license_plate_normalized"] = self._ensure_plate_free(
                updates["license_plate"], exclude_id=vehicle.id
            )
        return self._commit_guarded(lambda: self.repo.update(self.db, vehicle, **updates))

    def delete_vehicle(self, vehicle_id: int, user: User) -> dict:
        """Soft delete; refused while the vehicle has open appointments"""
        vehicle = self.get_vehicle(vehicle_id, user)
        if self.repo.has_open_appointments(self.db, vehicle.id):
            raise HTTPException(
                status_code=409,
                detail="This vehicle has open appointments. Cancel them before deleting it.",
            )
        vehicle.is_active = False
        self.db.commit()
        logger.info(f"🗃️ Vehicle {vehicle.id} deactivated by user {user.id}")
        return {"message": "Vehicle deleted"}

    async def upload_image(self, vehicle_id: int, file: UploadFile, user: User) -> Vehicle:
        vehicle = self.get_vehicle(vehicle_id, user)
        try:
            key = await file_storage.upload_image(file, "vehicles")
        except file_storage.FileValidationError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        old_key = vehicle.image_key
        vehicle.image_key = key
        self.db.commit()
        self.db.refresh(vehicle)
        if old_key:
            file_storage.delete_file(old_key)
        return vehicle
