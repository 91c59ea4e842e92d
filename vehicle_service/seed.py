"""
Insert the default service catalog and workshop technicians.

Run with ``python -m vehicle_service.seed``; start-up also calls it when
SEED_DEMO_DATA is set. Tables that already hold rows are left alone.
"""

import logging
from datetime import time

from sqlalchemy.orm import Session

from .database import Base, SessionLocal, engine
from .models import ServiceType, Technician

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_TYPES = [
    {
        "name": "Periodic Maintenance",
        "description": "Engine oil, filter replacement and general checks",
        "estimated_duration_minutes": 60,
        "price": 1500.00,
        "icon_class": "bi-gear-fill",
        "color_code": "#0d6efd",
    },
    {
        "name": "Brake Service",
        "description": "Brake pad and disc inspection and replacement",
        "estimated_duration_minutes": 90,
        "price": 2500.00,
        "icon_class": "bi-disc-fill",
        "color_code": "#dc3545",
    },
    {
        "name": "Tyre Change",
        "description": "Four tyre change with balancing and alignment",
        "estimated_duration_minutes": 45,
        "price": 800.00,
        "icon_class": "bi-vinyl-fill",
        "color_code": "#198754",
    },
    {
        "name": "Inspection Preparation",
        "description": "Checks ahead of the official roadworthiness inspection",
        "estimated_duration_minutes": 120,
        "price": 500.00,
        "icon_class": "bi-clipboard-check-fill",
        "color_code": "#ffc107",
    },
    {
        "name": "Air Conditioning Service",
        "description": "Refrigerant refill and system check",
        "estimated_duration_minutes": 60,
        "price": 1200.00,
        "icon_class": "bi-snow",
        "color_code": "#0dcaf0",
    },
    {
        "name": "Engine Diagnostics",
        "description": "Fault code reading and engine diagnostics",
        "estimated_duration_minutes": 45,
        "price": 750.00,
        "icon_class": "bi-exclamation-triangle-fill",
        "color_code": "#fd7e14",
    },
    {
        "name": "Detailed Wash",
        "description": "Interior and exterior detailing with polish",
        "estimated_duration_minutes": 180,
        "price": 1000.00,
        "icon_class": "bi-droplet-fill",
        "color_code": "#6f42c1",
    },
    {
        "name": "Battery Replacement",
        "description": "Battery test and replacement",
        "estimated_duration_minutes": 30,
        "price": 2000.00,
        "icon_class": "bi-battery-charging",
        "color_code": "#20c997",
    },
]

DEFAULT_TECHNICIANS = [
    ("Ahmet", "Yılmaz", "0532 111 22 33", "Engine and Transmission", 15, time(8, 0), time(18, 0)),
    ("Mehmet", "Kaya", "0533 222 33 44", "Electrical and Electronics", 10, time(8, 0), time(18, 0)),
    ("Ali", "Demir", "0534 333 44 55", "Brakes and Suspension", 8, time(9, 0), time(19, 0)),
    ("Mustafa", "Şahin", "0535 444 55 66", "Climate Control", 5, time(8, 0), time(17, 0)),
    ("Emre", "Çelik", "0536 555 66 77", "Tyres and Wheel Alignment", 6, time(8, 30), time(18, 30)),
]


def seed_defaults(db: Session) -> dict:
    """Insert defaults into empty tables and report how many rows were added"""
    added = {"service_types": 0, "technicians": 0}

    if db.query(ServiceType.id).first() is None:
        for sort_order, data in enumerate(DEFAULT_SERVICE_TYPES, start=1):
            db.add(ServiceType(sort_order=sort_order, is_active=True, **data))
        added["service_types"] = len(DEFAULT_SERVICE_TYPES)

    if db.query(Technician.id).first() is None:
        for first, last, phone, specialization, years, start, end in DEFAULT_TECHNICIANS:
            db.add(
                Technician(
                    first_name=first,
                    last_name=last,
                    phone_number=phone,
                    email=f"{first.lower()}@workshop.example",
                    specialization=specialization,
                    experience_years=years,
                    work_start_time=start,
                    work_end_time=end,
                    is_active=True,
                )
            )
        added["technicians"] = len(DEFAULT_TECHNICIANS)

    db.commit()
    logger.info(
        f"🌱 Seeded {added['service_types']} service types, {added['technicians']} technicians"
    )
    return added


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_defaults(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
