"""Dashboard router - admin statistics and the customer overview"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin, get_current_user
from ...database import get_db
from ...models import AppointmentStatus, User
from .schemas import (
    AdminDashboardResponse,
    ChartDataResponse,
    ReportResponse,
    UserDashboardResponse,
)
from .service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dashboard"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(db)


@router.get("/dashboard", response_model=UserDashboardResponse)
async def get_user_dashboard(
    current_user: User = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.user_dashboard(current_user)


@router.get("/admin/dashboard", response_model=AdminDashboardResponse)
async def get_admin_dashboard(
    current_admin: User = Depends(get_current_admin),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.admin_dashboard()


@router.get("/admin/dashboard/report", response_model=ReportResponse)
async def get_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
    service_type_id: Optional[int] = Query(None),
    technician_id: Optional[int] = Query(None),
    current_admin: User = Depends(get_current_admin),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.report(start_date, end_date, status, service_type_id, technician_id)


@router.get("/admin/dashboard/chart-data", response_model=ChartDataResponse)
async def get_chart_data(
    current_admin: User = Depends(get_current_admin),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Last seven days and per-service-type totals for the dashboard charts"""
    return service.chart_data()
