"""
Slot availability.

A day is a fixed grid of half-hour slots from SLOT_GRID_START_HOUR up to
(not including) SLOT_GRID_END_HOUR. A slot without a technician holds up to
GENERAL_SLOT_CAPACITY non-cancelled bookings; a technician holds at most one
booking per slot. Technician working hours only matter to
available_technicians(), never to the generic slot list.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import func, select, text
from sqlalchemy.orm import Session

from ...config import (
    GENERAL_SLOT_CAPACITY,
    SLOT_GRID_END_HOUR,
    SLOT_GRID_START_HOUR,
    SLOT_INTERVAL_MINUTES,
)
from ...models import Appointment, AppointmentStatus, Technician

logger = logging.getLogger(__name__)


def slot_grid() -> list[time]:
    """Every slot start time of a working day"""
    slots = []
    current = datetime.combine(date.min, time(SLOT_GRID_START_HOUR, 0))
    end = datetime.combine(date.min, time(SLOT_GRID_END_HOUR, 0))
    while current < end:
        slots.append(current.time())
        current += timedelta(minutes=SLOT_INTERVAL_MINUTES)
    return slots


def is_on_grid(slot_time: time) -> bool:
    return slot_time in slot_grid()


def _bookings_query(
    db: Session,
    slot_date: date,
    technician_id: Optional[int] = None,
    exclude_appointment_id: Optional[int] = None,
):
    query = db.query(Appointment).filter(
        Appointment.appointment_date == slot_date,
        Appointment.status != AppointmentStatus.CANCELLED,
    )
    if technician_id is not None:
        query = query.filter(Appointment.technician_id == technician_id)
    if exclude_appointment_id is not None:
        query = query.filter(Appointment.id != exclude_appointment_id)
    return query


def _has_room(count: int, technician_id: Optional[int]) -> bool:
    if technician_id is None:
        return count < GENERAL_SLOT_CAPACITY
    return count == 0


def count_slot_bookings(
    db: Session,
    slot_date: date,
    slot_time: time,
    technician_id: Optional[int] = None,
    exclude_appointment_id: Optional[int] = None,
) -> int:
    return (
        _bookings_query(db, slot_date, technician_id, exclude_appointment_id)
        .filter(Appointment.appointment_time == slot_time)
        .count()
    )


def is_slot_available(
    db: Session,
    slot_date: date,
    slot_time: time,
    technician_id: Optional[int] = None,
    exclude_appointment_id: Optional[int] = None,
) -> bool:
    """Whether one more booking fits in the slot"""
    count = count_slot_bookings(db, slot_date, slot_time, technician_id, exclude_appointment_id)
    return _has_room(count, technician_id)


def available_slots(
    db: Session, slot_date: date, technician_id: Optional[int] = None
) -> list[str]:
    """Grid slots of ``slot_date`` that can take another booking, as HH:MM"""
    counts = dict(
        _bookings_query(db, slot_date, technician_id)
        .with_entities(Appointment.appointment_time, func.count(Appointment.id))
        .group_by(Appointment.appointment_time)
        .all()
    )
    return [
        f"{slot:%H:%M}"
        for slot in slot_grid()
        if _has_room(counts.get(slot, 0), technician_id)
    ]


def available_technicians(db: Session, slot_date: date, slot_time: time) -> list[Technician]:
    """Active technicians free at the slot whose shift covers it"""
    busy_ids = select(Appointment.technician_id).where(
        Appointment.appointment_date == slot_date,
        Appointment.appointment_time == slot_time,
        Appointment.status != AppointmentStatus.CANCELLED,
        Appointment.technician_id.isnot(None),
    )
    return (
        db.query(Technician)
        .filter(
            Technician.is_active.is_(True),
            Technician.id.notin_(busy_ids),
            Technician.work_start_time <= slot_time,
            Technician.work_end_time > slot_time,
        )
        .order_by(Technician.first_name, Technician.last_name)
        .all()
    )


def slot_lock_key(slot_date: date, slot_time: time) -> int:
    return slot_date.toordinal() * 1440 + slot_time.hour * 60 + slot_time.minute


def lock_slot(db: Session, slot_date: date, slot_time: time) -> None:
    """
    Serialise writers of one slot until the current transaction ends.

    PostgreSQL takes a transaction-scoped advisory lock on the slot. SQLite
    has no row or advisory locks, so the transaction is opened with
    BEGIN IMMEDIATE, which holds the database write lock until commit.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        db.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": slot_lock_key(slot_date, slot_time)},
        )
    elif dialect == "sqlite":
        # pysqlite only issues a deferred BEGIN before the first write
        if not db.connection().connection.dbapi_connection.in_transaction:
            db.execute(text("BEGIN IMMEDIATE"))
    else:
        return
    logger.debug(f"🔒 Locked slot {slot_date} {slot_time:%H:%M}")
