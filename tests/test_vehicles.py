"""Vehicle registration, plate uniqueness and soft deletion."""
import pytest

from vehicle_service.models import AppointmentStatus, Vehicle


def vehicle_payload(**overrides):
    payload = {
        "license_plate": "34 ABC 123",
        "brand": "Renault",
        "model": "Clio",
        "year": 2019,
        "color": "Red",
        "mileage": 45000,
        "fuel_type": "diesel",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def user(factory, login):
    return login(factory.user())


def test_create_vehicle(client, user):
    response = client.post("/vehicles", json=vehicle_payload(license_plate=" 34 abc 123 "))

    assert response.status_code == 201
    data = response.json()
    assert data["license_plate"] == "34 ABC 123"
    assert data["fuel_type"] == "diesel"
    assert data["vehicle_info"] == "Renault Clio (2019) - 34 ABC 123"
    assert data["image_url"] is None
    assert data["total_appointments"] == 0


def test_fuel_type_defaults_to_gasoline(client, user):
    payload = vehicle_payload()
    del payload["fuel_type"]

    response = client.post("/vehicles", json=payload)

    assert response.json()["fuel_type"] == "gasoline"


@pytest.mark.parametrize(
    "plate",
    ["34abc123", "34 ABC123", "34ABC 123", "  34 abc 123"],
)
def test_plate_uniqueness_ignores_case_and_spaces(client, user, plate):
    assert client.post("/vehicles", json=vehicle_payload()).status_code == 201

    response = client.post("/vehicles", json=vehicle_payload(license_plate=plate))

    assert response.status_code == 400
    assert response.json()["detail"] == "A vehicle with this license plate is already registered"


def test_plate_taken_by_another_user(client, factory, user):
    factory.vehicle(factory.user(), "34abc123")

    response = client.post("/vehicles", json=vehicle_payload())

    assert response.status_code == 400


def test_plate_of_deleted_vehicle_can_be_reused(client, user):
    vehicle_id = client.post("/vehicles", json=vehicle_payload()).json()["id"]
    assert client.delete(f"/vehicles/{vehicle_id}").status_code == 200

    response = client.post("/vehicles", json=vehicle_payload(license_plate="34abc123"))

    assert response.status_code == 201


@pytest.mark.parametrize(
    "field,value",
    [
        ("license_plate", "ABC"),
        ("license_plate", "AB 123 CD"),
        ("year", 1899),
        ("year", 2031),
        ("mileage", -1),
        ("fuel_type", "steam"),
        ("brand", ""),
    ],
)
def test_invalid_vehicle_fields(client, user, field, value):
    response = client.post("/vehicles", json=vehicle_payload(**{field: value}))

    assert response.status_code == 422


def test_update_vehicle(client, factory, user):
    vehicle = factory.vehicle(user, "34 ABC 123")

    response = client.put(f"/vehicles/{vehicle.id}", json={"mileage": 50000, "color": "Blue"})

    assert response.status_code == 200
    assert response.json()["mileage"] == 50000
    assert response.json()["color"] == "Blue"
    assert response.json()["license_plate"] == "34 ABC 123"


def test_update_keeping_own_plate_is_allowed(client, factory, user):
    vehicle = factory.vehicle(user, "34 ABC 123")

    response = client.put(f"/vehicles/{vehicle.id}", json={"license_plate": "34abc123"})

    assert response.status_code == 200
    assert response.json()["license_plate"] == "34ABC123"


def test_update_to_taken_plate_is_rejected(client, factory, user):
    factory.vehicle(user, "34 ABC 123")
    second = factory.vehicle(user, "06 DEF 456")

    response = client.put(f"/vehicles/{second.id}", json={"license_plate": "34 abc 123"})

    assert response.status_code == 400


def test_list_vehicles_with_counts_and_search(client, factory, user, future_day):
    renault = factory.vehicle(user, "34 ABC 123", brand="Renault", model="Clio")
    factory.vehicle(user, "06 DEF 456", brand="Fiat", model="Egea")
    factory.vehicle(user, "35 GH 789", is_active=False)
    factory.vehicle(factory.user(), "16 JK 012")
    service_type = factory.service_type()
    factory.appointment(user, renault, service_type, future_day)
    factory.appointment(
        user, renault, service_type, future_day, status=AppointmentStatus.COMPLETED
    )

    listing = client.get("/vehicles").json()
    searched = client.get("/vehicles", params={"search": "clio"}).json()

    assert listing["total_count"] == 2
    assert searched["total_count"] == 1
    assert searched["search"] == "clio"
    row = searched["vehicles"][0]
    assert row["id"] == renault.id
    assert row["total_appointments"] == 2
    assert row["completed_appointments"] == 1
    assert row["open_appointments"] == 1


def test_vehicle_detail_has_recent_appointments(client, factory, user, future_day):
    vehicle = factory.vehicle(user)
    service_type = factory.service_type(name="Brake Service")
    factory.appointment(user, vehicle, service_type, future_day)

    data = client.get(f"/vehicles/{vehicle.id}").json()

    assert len(data["recent_appointments"]) == 1
    assert data["recent_appointments"][0]["service_type_name"] == "Brake Service"


def test_other_users_vehicle_is_not_found(client, factory, user):
    foreign = factory.vehicle(factory.user())

    assert client.get(f"/vehicles/{foreign.id}").status_code == 404
    assert client.put(f"/vehicles/{foreign.id}", json={"color": "Black"}).status_code == 404
    assert client.delete(f"/vehicles/{foreign.id}").status_code == 404


def test_delete_is_soft(client, db, factory, user):
    vehicle = factory.vehicle(user)

    response = client.delete(f"/vehicles/{vehicle.id}")

    assert response.status_code == 200
    db.refresh(vehicle)
    assert vehicle.is_active is False
    assert db.query(Vehicle).count() == 1
    assert client.get(f"/vehicles/{vehicle.id}").status_code == 404


@pytest.mark.parametrize(
    "status,expected",
    [
        (AppointmentStatus.PENDING, 409),
        (AppointmentStatus.CONFIRMED, 409),
        (AppointmentStatus.IN_PROGRESS, 409),
        (AppointmentStatus.COMPLETED, 200),
        (AppointmentStatus.CANCELLED, 200),
    ],
)
def test_delete_blocked_by_open_appointments(client, factory, user, future_day, status, expected):
    vehicle = factory.vehicle(user)
    factory.appointment(user, vehicle, factory.service_type(), future_day, status=status)

    assert client.delete(f"/vehicles/{vehicle.id}").status_code == expected


class TestVehicleImage:
    def test_upload_replaces_previous_image(self, client, db, factory, user, monkeypatch):
        from vehicle_service.services import file_storage

        deleted = []

        async def fake_upload(file, folder):
            assert folder == "vehicles"
            return "uploads/vehicles/new.png"

        monkeypatch.setattr(file_storage, "upload_image", fake_upload)
        monkeypatch.setattr(file_storage, "delete_file", lambda key: deleted.append(key) or True)
        vehicle = factory.vehicle(user, image_key="uploads/vehicles/old.png")

        response = client.post(
            f"/vehicles/{vehicle.id}/image",
            files={"file": ("car.png", b"\x89PNG data", "image/png")},
        )

        assert response.status_code == 200
        db.refresh(vehicle)
        assert vehicle.image_key == "uploads/vehicles/new.png"
        assert deleted == ["uploads/vehicles/old.png"]

    def test_wrong_file_type_is_rejected(self, client, factory, user):
        vehicle = factory.vehicle(user)

        response = client.post(
            f"/vehicles/{vehicle.id}/image",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert "Invalid file type" in response.json()["detail"]
