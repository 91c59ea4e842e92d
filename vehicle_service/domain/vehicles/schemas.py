"""Vehicle schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import FuelType
from ...shared.validators import validate_license_plate
from ..appointments.schemas import AppointmentBrief


class VehicleCreate(BaseModel):
    """Schema for registering a vehicle"""

    license_plate: str
    brand: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)
    year: int = Field(..., ge=1900, le=2030)
    color: Optional[str] = Field(None, max_length=20)
    mileage: Optional[int] = Field(None, ge=0, le=2_000_000)
    fuel_type: FuelType = FuelType.GASOLINE
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("license_plate")
    @classmethod
    def check_license_plate(cls, v):
        return validate_license_plate(v)


class VehicleUpdate(BaseModel):
    license_plate: Optional[str] = None
    brand: Optional[str] = Field(None, min_length=1, max_length=50)
    model: Optional[str] = Field(None, min_length=1, max_length=50)
    year: Optional[int] = Field(None, ge=1900, le=2030)
    color: Optional[str] = Field(None, max_length=20)
    mileage: Optional[int] = Field(None, ge=0, le=2_000_000)
    fuel_type: Optional[FuelType] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("license_plate")
    @classmethod
    def check_license_plate(cls, v):
        if v is None:
            return v
        return validate_license_plate(v)


class VehicleResponse(BaseModel):
    id: int
    license_plate: str
    brand: str
    model: str
    year: int
    color: Optional[str] = None
    mileage: Optional[int] = None
    fuel_type: FuelType
    image_url: Optional[str] = None
    notes: Optional[str] = None
    vehicle_info: str
    is_active: bool
    created_at: Optional[datetime] = None
    total_appointments: int = 0
    completed_appointments: int = 0
    open_appointments: int = 0


class VehicleDetailResponse(VehicleResponse):
    recent_appointments: list[AppointmentBrief] = []


class VehicleListResponse(BaseModel):
    vehicles: list[VehicleResponse]
    total_count: int
    search: Optional[str] = None
