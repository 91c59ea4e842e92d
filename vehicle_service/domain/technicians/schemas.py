"""Technician schemas - Pydantic models for validation"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import validate_email, validate_phone


class TechnicianBase(BaseModel):
    phone_number: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    specialization: Optional[str] = Field(None, max_length=100)
    experience_years: Optional[int] = Field(None, ge=0, le=50)

    @field_validator("phone_number")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class TechnicianCreate(TechnicianBase):
    """Schema for adding a technician"""

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    work_start_time: time = time(8, 0)
    work_end_time: time = time(18, 0)

    @model_validator(mode="after")
    def check_work_window(self):
        if self.work_end_time <= self.work_start_time:
            raise ValueError("Work end time must be after start time")
        return self


class TechnicianUpdate(TechnicianBase):
    """Schema for editing a technician; the work window is re-checked in the service"""

    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    work_start_time: Optional[time] = None
    work_end_time: Optional[time] = None
    is_active: Optional[bool] = None


class TechnicianResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    specialization: Optional[str] = None
    experience_years: Optional[int] = None
    image_url: Optional[str] = None
    work_start_time: time
    work_end_time: time
    working_hours: str
    is_active: bool
    created_at: Optional[datetime] = None


class TechnicianAppointmentSummary(BaseModel):
    id: int
    appointment_date: date
    appointment_time: time
    status: dict
    service_type_name: str
    vehicle_info: str


class TechnicianDetailResponse(TechnicianResponse):
    appointments: list[TechnicianAppointmentSummary] = []
