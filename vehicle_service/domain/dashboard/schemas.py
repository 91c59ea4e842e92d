"""Dashboard schemas"""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from ...models import AppointmentStatus
from ..appointments.schemas import AppointmentBrief


class PeriodSummary(BaseModel):
    appointments: int
    completed: int
    revenue: float


class DailyAppointmentData(BaseModel):
    day: date
    day_name: str
    count: int
    completed: int
    revenue: float


class ServiceTypeStats(BaseModel):
    service_type_id: int
    service_name: str
    appointment_count: int
    total_revenue: float
    color_code: Optional[str] = None


class AdminDashboardResponse(BaseModel):
    total_users: int
    total_vehicles: int
    total_appointments: int
    total_technicians: int
    total_service_types: int
    status_counts: dict[str, int]
    today: PeriodSummary
    this_week: PeriodSummary
    this_month: PeriodSummary
    recent_appointments: list[AppointmentBrief]
    upcoming_today: list[AppointmentBrief]


class ReportResponse(BaseModel):
    start_date: date
    end_date: date
    status: Optional[AppointmentStatus] = None
    service_type_id: Optional[int] = None
    technician_id: Optional[int] = None
    total: int
    completed: int
    cancelled: int
    pending: int
    revenue: float


class ChartDataResponse(BaseModel):
    last_7_days: list[DailyAppointmentData]
    service_types: list[ServiceTypeStats]


class UserDashboardResponse(BaseModel):
    first_name: str
    total_vehicles: int
    total_appointments: int
    completed_appointments: int
    upcoming_appointments: list[AppointmentBrief]
