"""Appointment schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment; the time is an HH:MM grid slot"""

    vehicle_id: int
    service_type_id: int
    appointment_date: date
    appointment_time: str = Field(..., max_length=5)
    customer_notes: Optional[str] = Field(None, max_length=500)


class AppointmentCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class AppointmentApprove(BaseModel):
    technician_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=500)


class AppointmentComplete(BaseModel):
    notes: Optional[str] = Field(None, max_length=500)


class TechnicianAssign(BaseModel):
    technician_id: int


class VehicleRef(BaseModel):
    id: int
    license_plate: str
    vehicle_info: str


class ServiceTypeRef(BaseModel):
    id: int
    name: str
    price: float
    formatted_duration: str
    color_code: Optional[str] = None


class TechnicianRef(BaseModel):
    id: int
    full_name: str
    specialization: Optional[str] = None
    working_hours: Optional[str] = None


class CustomerRef(BaseModel):
    id: int
    full_name: str
    email: str
    phone_number: Optional[str] = None


class AppointmentResponse(BaseModel):
    """Full appointment view shared by owner and admin endpoints"""

    id: int
    appointment_date: date
    appointment_time: str
    scheduled_at: datetime
    status: dict
    customer_notes: Optional[str] = None
    technician_notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    vehicle: VehicleRef
    service_type: ServiceTypeRef
    technician: Optional[TechnicianRef] = None
    customer: Optional[CustomerRef] = None
    can_cancel: bool = False


class AppointmentBrief(BaseModel):
    """Row in lists, dashboards and detail pages of other entities"""

    id: int
    appointment_date: date
    appointment_time: str
    status: dict
    service_type_name: str
    vehicle_info: str
    technician_name: Optional[str] = None
    customer_name: Optional[str] = None


class AppointmentPage(BaseModel):
    items: list[AppointmentResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class AdminAppointmentDetail(AppointmentResponse):
    available_technicians: list[TechnicianRef] = []


class AvailableSlotsResponse(BaseModel):
    day: date
    technician_id: Optional[int] = None
    slots: list[str]
