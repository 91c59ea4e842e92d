"""Dashboard service - admin statistics, reports and the customer overview"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import AppointmentStatus, User
from ..appointments.presenters import to_brief
from .repository import DashboardRepository

logger = logging.getLogger(__name__)


def week_start(day: date) -> date:
    """Sunday on or before ``day``"""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def month_start(day: date) -> date:
    return day.replace(day=1)


class DashboardService:
    """Service layer for reporting"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DashboardRepository()

    def _period(self, start: date, end: date) -> dict:
        summary = self.repo.window_summary(self.db, start, end)
        return {
            "appointments": summary["total"],
            "completed": summary["completed"],
            "revenue": summary["revenue"],
        }

    def admin_dashboard(self, now: Optional[datetime] = None) -> dict:
        now = now or datetime.now()
        today = now.date()
        status_counts = self.repo.status_counts(self.db)

        return {
            **self.repo.entity_totals(self.db),
            "status_counts": {status.value: count for status, count in status_counts.items()},
            "today": self._period(today, today),
            "this_week": self._period(week_start(today), today),
            "this_month": self._period(month_start(today), today),
            "recent_appointments": [
                to_brief(a, include_customer=True)
                for a in self.repo.recent_appointments(self.db)
            ],
            "upcoming_today": [
                to_brief(a, include_customer=True)
                for a in self.repo.upcoming_today(self.db, today, now.time())
            ],
        }

    def report(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[AppointmentStatus] = None,
        service_type_id: Optional[int] = None,
        technician_id: Optional[int] = None,
    ) -> dict:
        """Totals for a date range; defaults to the current month"""
        today = date.today()
        start_date = start_date or month_start(today)
        end_date = end_date or today
        if start_date > end_date:
            raise HTTPException(status_code=400, detail="Start date must not be after end date")

        summary = self.repo.window_summary(
            self.db, start_date, end_date, status, service_type_id, technician_id
        )
        logger.info(f"📊 Report {start_date} - {end_date}: {summary['total']} appointments")
        return {
            "start_date": start_date,
            "end_date": end_date,
            "status": status,
            "service_type_id": service_type_id,
            "technician_id": technician_id,
            **summary,
        }

    def chart_data(self, today: Optional[date] = None) -> dict:
        today = today or date.today()
        first_day = today - timedelta(days=6)
        daily = self.repo.daily_summary(self.db, first_day, today)

        last_7_days = []
        for offset in range(7):
            day = first_day + timedelta(days=offset)
            data = daily.get(day, {"count": 0, "completed": 0, "revenue": 0.0})
            last_7_days.append({"day": day, "day_name": day.strftime("%a"), **data})

        return {
            "last_7_days": last_7_days,
            "service_types": self.repo.service_type_breakdown(self.db),
        }

    def user_dashboard(self, user: User) -> dict:
        return {
            "first_name": user.first_name,
            **self.repo.user_summary(self.db, user.id),
            "upcoming_appointments": [
                to_brief(a) for a in self.repo.user_upcoming(self.db, user.id, date.today())
            ],
        }
