"""Shared test fixtures."""
import os

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["R2_ACCESS_KEY_ID"] = ""
os.environ["SECURITY_HEADERS_ENABLED"] = "true"
os.environ["ENVIRONMENT"] = "test"

from datetime import date, time, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from vehicle_service.auth import get_current_user  # noqa: E402
from vehicle_service.database import Base, get_db  # noqa: E402
from vehicle_service.main import app  # noqa: E402
from vehicle_service.models import (  # noqa: E402
    Appointment,
    AppointmentStatus,
    ServiceType,
    Technician,
    User,
    UserRole,
    Vehicle,
)
from vehicle_service.shared.validators import normalize_license_plate  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """TestClient bound to the test session; no lifespan, so no Redis or seeding."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login():
    """Authenticate requests as the given user; admin routes still check the role."""

    def _login(user: User):
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    yield _login
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def future_day() -> date:
    return date.today() + timedelta(days=10)


class Factory:
    """Inserts committed rows with sensible defaults."""

    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def _save(self, instance):
        self.db.add(instance)
        self.db.commit()
        self.db.refresh(instance)
        return instance

    def user(self, role: UserRole = UserRole.USER, **kwargs) -> User:
        n = self._next()
        data = {
            "firebase_uid": f"uid-{n}",
            "email": f"user{n}@example.com",
            "first_name": "Test",
            "last_name": f"User{n}",
            "role": role,
        }
        data.update(kwargs)
        return self._save(User(**data))

    def admin(self, **kwargs) -> User:
        return self.user(role=UserRole.ADMIN, **kwargs)

    def vehicle(self, user: User, license_plate: str = None, **kwargs) -> Vehicle:
        plate = license_plate or f"06 AUT {1000 + self._next()}"
        data = {
            "user_id": user.id,
            "license_plate": plate,
            "license_plate_normalized": normalize_license_plate(plate),
            "brand": "Toyota",
            "model": "Corolla",
            "year": 2020,
        }
        data.update(kwargs)
        return self._save(Vehicle(**data))

    def service_type(self, **kwargs) -> ServiceType:
        data = {
            "name": f"Service {self._next()}",
            "estimated_duration_minutes": 60,
            "price": 1500.0,
            "color_code": "#0d6efd",
        }
        data.update(kwargs)
        return self._save(ServiceType(**data))

    def technician(self, **kwargs) -> Technician:
        n = self._next()
        data = {
            "first_name": f"Tech{n}",
            "last_name": "Mechanic",
            "work_start_time": time(8, 0),
            "work_end_time": time(18, 0),
        }
        data.update(kwargs)
        return self._save(Technician(**data))

    def appointment(
        self,
        user: User,
        vehicle: Vehicle,
        service_type: ServiceType,
        appointment_date: date,
        appointment_time: time = time(9, 0),
        status: AppointmentStatus = AppointmentStatus.PENDING,
        **kwargs,
    ) -> Appointment:
        return self._save(
            Appointment(
                user_id=user.id,
                vehicle_id=vehicle.id,
                service_type_id=service_type.id,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                status=status,
                **kwargs,
            )
        )


@pytest.fixture
def factory(db) -> Factory:
    return Factory(db)


@pytest.fixture
def customer(factory, login):
    """A signed-in customer with one vehicle."""
    user = login(factory.user())
    vehicle = factory.vehicle(user, "34 ABC 123")
    return user, vehicle
