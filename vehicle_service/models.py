import enum
from datetime import datetime, time

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
    text,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def _enum_column(enum_cls, name: str, **kwargs) -> Column:
    return Column(
        SAEnum(
            enum_cls,
            name=name,
            values_callable=lambda e: [x.value for x in e],
            native_enum=False,
            validate_strings=True,
            length=20,
        ),
        **kwargs,
    )


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class FuelType(str, enum.Enum):
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    LPG = "lpg"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that still occupy the vehicle and the workshop
OPEN_STATUSES = (
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.IN_PROGRESS,
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(50), nullable=False, default="")
    last_name = Column(String(50), nullable=False, default="")
    phone_number = Column(String(20), nullable=True)
    profile_image_key = Column(String(500), nullable=True)  # storage key, not URL
    role = _enum_column(UserRole, "userrole", default=UserRole.USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    vehicles = relationship(
        "Vehicle", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    appointments = relationship("Appointment", back_populates="user")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Vehicle(Base):
    __tablename__ = "vehicles"
    __table_args__ = (
        # A plate may be reused once the vehicle that held it is soft-deleted
        Index(
            "uq_vehicles_active_plate",
            "license_plate_normalized",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    license_plate = Column(String(15), nullable=False)  # upper-cased, spacing as entered
    license_plate_normalized = Column(String(15), nullable=False, index=True)  # no spaces
    brand = Column(String(50), nullable=False)
    model = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(String(20), nullable=True)
    mileage = Column(Integer, nullable=True)
    fuel_type = _enum_column(FuelType, "fueltype", default=FuelType.GASOLINE, nullable=False)
    image_key = Column(String(500), nullable=True)
    notes = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="vehicles")
    appointments = relationship("Appointment", back_populates="vehicle")

    @property
    def vehicle_info(self) -> str:
        return f"{self.brand} {self.model} ({self.year}) - {self.license_plate}"


class ServiceType(Base):
    __tablename__ = "service_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    estimated_duration_minutes = Column(Integer, nullable=False)
    price = Column(Float, nullable=False, default=0)
    icon_class = Column(String(50), nullable=True)
    color_code = Column(String(20), nullable=True)  # e.g. #0d6efd
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    appointments = relationship("Appointment", back_populates="service_type")

    @property
    def formatted_duration(self) -> str:
        hours, minutes = divmod(self.estimated_duration_minutes or 0, 60)
        if hours and minutes:
            return f"{hours} h {minutes} min"
        if hours:
            return f"{hours} h"
        return f"{minutes} min"


class Technician(Base):
    __tablename__ = "technicians"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    phone_number = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    specialization = Column(String(100), nullable=True)
    experience_years = Column(Integer, nullable=True)
    image_key = Column(String(500), nullable=True)
    work_start_time = Column(Time, default=time(8, 0), nullable=False)
    work_end_time = Column(Time, default=time(18, 0), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    appointments = relationship("Appointment", back_populates="technician", passive_deletes=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def working_hours(self) -> str:
        return f"{self.work_start_time:%H:%M} - {self.work_end_time:%H:%M}"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_slot", "appointment_date", "appointment_time", "technician_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=False)

    # Lifecycle: pending → confirmed → in_progress → completed
    # cancelled is reachable from pending and confirmed (and in_progress for admins)
    status = _enum_column(
        AppointmentStatus,
        "appointmentstatus",
        default=AppointmentStatus.PENDING,
        nullable=False,
        index=True,
    )

    customer_notes = Column(String(500), nullable=True)
    technician_notes = Column(String(500), nullable=True)
    cancellation_reason = Column(String(500), nullable=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="RESTRICT"), nullable=False)
    service_type_id = Column(
        Integer, ForeignKey("service_types.id", ondelete="RESTRICT"), nullable=False
    )
    technician_id = Column(
        Integer, ForeignKey("technicians.id", ondelete="SET NULL"), nullable=True
    )

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="appointments")
    vehicle = relationship("Vehicle", back_populates="appointments")
    service_type = relationship("ServiceType", back_populates="appointments")
    technician = relationship("Technician", back_populates="appointments")

    @property
    def scheduled_at(self) -> datetime:
        return datetime.combine(self.appointment_date, self.appointment_time)
