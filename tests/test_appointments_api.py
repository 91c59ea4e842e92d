"""Booking, owner cancellation and the admin workflow over HTTP."""
from datetime import date, time, timedelta

import pytest

from vehicle_service.domain.appointments import availability
from vehicle_service.models import Appointment, AppointmentStatus


@pytest.fixture
def service_type(factory):
    return factory.service_type(name="Periodic Maintenance", price=1500.0)


def book(client, vehicle, service_type, day, slot="09:00", **extra):
    payload = {
        "vehicle_id": vehicle.id,
        "service_type_id": service_type.id,
        "appointment_date": day.isoformat(),
        "appointment_time": slot,
    }
    payload.update(extra)
    return client.post("/appointments", json=payload)


class TestBooking:
    def test_book_appointment(self, client, customer, service_type, future_day):
        user, vehicle = customer

        response = book(client, vehicle, service_type, future_day, customer_notes="Noise on braking")

        assert response.status_code == 201
        data = response.json()
        assert data["status"]["value"] == "pending"
        assert data["status"]["label"] == "Pending"
        assert data["appointment_time"] == "09:00"
        assert data["appointment_date"] == future_day.isoformat()
        assert data["customer_notes"] == "Noise on braking"
        assert data["vehicle"]["license_plate"] == "34 ABC 123"
        assert data["service_type"]["name"] == "Periodic Maintenance"
        assert data["technician"] is None
        assert data["can_cancel"] is True

    def test_sixth_booking_in_a_slot_is_rejected(self, client, db, customer, service_type, future_day):
        user, vehicle = customer

        for _ in range(5):
            assert book(client, vehicle, service_type, future_day).status_code == 201
        response = book(client, vehicle, service_type, future_day)

        assert response.status_code == 409
        assert response.json()["detail"] == "No free capacity at this date and time"
        assert db.query(Appointment).count() == 5

    def test_cancelled_booking_frees_the_slot(self, client, customer, service_type, future_day):
        user, vehicle = customer
        ids = [book(client, vehicle, service_type, future_day).json()["id"] for _ in range(5)]

        assert client.post(f"/appointments/{ids[0]}/cancel").status_code == 200

        assert book(client, vehicle, service_type, future_day).status_code == 201

    def test_other_slot_still_open_when_one_is_full(self, client, customer, service_type, future_day):
        user, vehicle = customer
        for _ in range(5):
            book(client, vehicle, service_type, future_day)

        assert book(client, vehicle, service_type, future_day, slot="09:30").status_code == 201

    @pytest.mark.parametrize("slot", ["09:15", "07:30", "18:00"])
    def test_off_grid_time_is_rejected(self, client, customer, service_type, future_day, slot):
        user, vehicle = customer

        response = book(client, vehicle, service_type, future_day, slot=slot)

        assert response.status_code == 400
        assert response.json()["detail"] == "Please choose one of the offered time slots"

    def test_malformed_time_is_rejected(self, client, customer, service_type, future_day):
        user, vehicle = customer

        response = book(client, vehicle, service_type, future_day, slot="nine")

        assert response.status_code == 400
        assert "Invalid time format" in response.json()["detail"]

    def test_past_date_is_rejected(self, client, customer, service_type):
        user, vehicle = customer

        response = book(client, vehicle, service_type, date.today() - timedelta(days=1))

        assert response.status_code == 400

    def test_date_more_than_a_year_ahead_is_rejected(self, client, customer, service_type):
        user, vehicle = customer

        response = book(client, vehicle, service_type, date.today() + timedelta(days=366))

        assert response.status_code == 400

    def test_today_is_accepted(self, client, customer, service_type):
        user, vehicle = customer

        response = book(client, vehicle, service_type, date.today(), slot="17:30")

        assert response.status_code == 201
        assert response.json()["can_cancel"] is False

    def test_someone_elses_vehicle_is_rejected(self, client, factory, customer, service_type, future_day):
        stranger_vehicle = factory.vehicle(factory.user(), "06 XY 4321")

        response = book(client, stranger_vehicle, service_type, future_day)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid vehicle selection"

    def test_deleted_vehicle_is_rejected(self, client, db, customer, service_type, future_day):
        user, vehicle = customer
        vehicle.is_active = False
        db.commit()

        assert book(client, vehicle, service_type, future_day).status_code == 400

    def test_inactive_service_type_is_rejected(self, client, factory, customer, future_day):
        user, vehicle = customer
        retired = factory.service_type(is_active=False)

        response = book(client, vehicle, retired, future_day)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid service type selection"

    def test_missing_fields_fail_validation(self, client, customer):
        response = client.post("/appointments", json={"appointment_time": "09:00"})

        assert response.status_code == 422


class TestCustomerViews:
    def test_list_only_own_appointments(self, client, factory, customer, service_type, future_day):
        user, vehicle = customer
        other = factory.user()
        factory.appointment(user, vehicle, service_type, future_day)
        factory.appointment(user, vehicle, service_type, future_day + timedelta(days=1))
        factory.appointment(other, factory.vehicle(other), service_type, future_day)

        data = client.get("/appointments").json()

        assert data["total"] == 2
        assert data["page_size"] == 10
        assert data["total_pages"] == 1
        # latest slot first
        assert data["items"][0]["appointment_date"] == (future_day + timedelta(days=1)).isoformat()

    def test_list_filters_by_status(self, client, factory, customer, service_type, future_day):
        user, vehicle = customer
        factory.appointment(user, vehicle, service_type, future_day)
        factory.appointment(
            user, vehicle, service_type, future_day, status=AppointmentStatus.CANCELLED
        )

        data = client.get("/appointments", params={"status": "cancelled"}).json()

        assert data["total"] == 1
        assert data["items"][0]["status"]["value"] == "cancelled"

    def test_list_paginates(self, client, factory, customer, service_type, future_day):
        user, vehicle = customer
        for offset in range(12):
            factory.appointment(user, vehicle, service_type, future_day + timedelta(days=offset))

        page_two = client.get("/appointments", params={"page": 2}).json()

        assert page_two["total"] == 12
        assert page_two["total_pages"] == 2
        assert len(page_two["items"]) == 2

    def test_other_users_appointment_is_not_found(self, client, factory, customer, service_type, future_day):
        other = factory.user()
        appointment = factory.appointment(other, factory.vehicle(other), service_type, future_day)

        assert client.get(f"/appointments/{appointment.id}").status_code == 404
        assert client.post(f"/appointments/{appointment.id}/cancel").status_code == 404

    def test_available_slots(self, client, factory, customer, service_type, future_day):
        user, vehicle = customer
        for _ in range(5):
            factory.appointment(user, vehicle, service_type, future_day, time(8, 0))

        response = client.get("/appointments/available-slots", params={"date": future_day.isoformat()})

        assert response.status_code == 200
        data = response.json()
        assert data["day"] == future_day.isoformat()
        assert len(data["slots"]) == 19
        assert "08:00" not in data["slots"]


class TestOwnerCancellation:
    def test_cancel_with_default_reason(self, client, factory, customer, service_type, future_day):
        user, vehicle = customer
        appointment = factory.appointment(user, vehicle, service_type, future_day)

        response = client.post(f"/appointments/{appointment.id}/cancel")

        assert response.status_code == 200
        data = response.json()
        assert data["status"]["value"] == "cancelled"
        assert data["cancellation_reason"] == "Cancelled by customer"
        assert data["can_cancel"] is False

    def test_cancel_with_reason(self, client, factory, customer, service_type, future_day):
        user, vehicle = customer
        appointment = factory.appointment(user, vehicle, service_type, future_day)

        response = client.post(
            f"/appointments/{appointment.id}/cancel", json={"reason": "Travelling that week"}
        )

        assert response.json()["cancellation_reason"] == "Travelling that week"

    def test_cancel_inside_24_hours_is_rejected(self, client, db, factory, customer, service_type):
        user, vehicle = customer
        appointment = factory.appointment(
            user, vehicle, service_type, date.today(), time(17, 30),
            status=AppointmentStatus.CONFIRMED,
        )

        response = client.post(f"/appointments/{appointment.id}/cancel")

        assert response.status_code == 409
        assert "24 hours" in response.json()["detail"]
        db.refresh(appointment)
        assert appointment.status == AppointmentStatus.CONFIRMED

    def test_cancel_in_progress_is_rejected(self, client, factory, customer, service_type, future_day):
        user, vehicle = customer
        appointment = factory.appointment(
            user, vehicle, service_type, future_day, status=AppointmentStatus.IN_PROGRESS
        )

        assert client.post(f"/appointments/{appointment.id}/cancel").status_code == 409

    def test_cancel_twice_is_rejected(self, client, factory, customer, service_type, future_day):
        user, vehicle = customer
        appointment = factory.appointment(user, vehicle, service_type, future_day)

        assert client.post(f"/appointments/{appointment.id}/cancel").status_code == 200
        assert client.post(f"/appointments/{appointment.id}/cancel").status_code == 409


class TestAdminWorkflow:
    @pytest.fixture
    def pending(self, factory, service_type, future_day):
        user = factory.user(first_name="Ayse", last_name="Kaya")
        vehicle = factory.vehicle(user, "35 KL 901")
        return factory.appointment(user, vehicle, service_type, future_day, time(10, 0))

    def test_full_workflow(self, client, db, factory, login, pending):
        login(factory.admin())
        technician = factory.technician(first_name="Mehmet", last_name="Kaya")

        approved = client.post(
            f"/admin/appointments/{pending.id}/approve",
            json={"technician_id": technician.id, "notes": "Customer waits on site"},
        )
        assert approved.status_code == 200
        assert approved.json()["status"]["value"] == "confirmed"
        assert approved.json()["technician"]["full_name"] == "Mehmet Kaya"
        assert approved.json()["approved_at"] is not None
        assert approved.json()["customer"]["full_name"] == "Ayse Kaya"

        started = client.post(f"/admin/appointments/{pending.id}/start")
        assert started.json()["status"]["value"] == "in_progress"

        again = client.post(f"/admin/appointments/{pending.id}/approve")
        assert again.status_code == 409
        db.refresh(pending)
        assert pending.status == AppointmentStatus.IN_PROGRESS

        completed = client.post(
            f"/admin/appointments/{pending.id}/complete", json={"notes": "Oil and filter changed"}
        )
        assert completed.status_code == 200
        assert completed.json()["status"]["value"] == "completed"
        assert completed.json()["technician_notes"] == "Oil and filter changed"
        assert completed.json()["completed_at"] is not None

        assert client.post(f"/admin/appointments/{pending.id}/cancel").status_code == 409

    def test_approve_without_body(self, client, factory, login, pending):
        login(factory.admin())

        response = client.post(f"/admin/appointments/{pending.id}/approve")

        assert response.status_code == 200
        assert response.json()["technician"] is None

    def test_approve_with_unknown_technician(self, client, db, factory, login, pending):
        login(factory.admin())

        response = client.post(
            f"/admin/appointments/{pending.id}/approve", json={"technician_id": 999}
        )

        assert response.status_code == 404
        db.refresh(pending)
        assert pending.status == AppointmentStatus.PENDING

    def test_start_pending_is_rejected(self, client, factory, login, pending):
        login(factory.admin())

        assert client.post(f"/admin/appointments/{pending.id}/start").status_code == 409

    def test_admin_cancel_default_reason(self, client, factory, login, pending):
        login(factory.admin())

        response = client.post(f"/admin/appointments/{pending.id}/cancel")

        assert response.json()["cancellation_reason"] == "Cancelled by administrator"

    def test_admin_cancel_inside_24_hours(self, client, factory, login, service_type):
        login(factory.admin())
        user = factory.user()
        appointment = factory.appointment(
            user, factory.vehicle(user), service_type, date.today(), time(17, 30)
        )

        response = client.post(
            f"/admin/appointments/{appointment.id}/cancel", json={"reason": "Workshop closed"}
        )

        assert response.status_code == 200
        assert response.json()["cancellation_reason"] == "Workshop closed"

    def test_assign_technician_any_status(self, client, factory, login, service_type, future_day):
        login(factory.admin())
        user = factory.user()
        appointment = factory.appointment(
            user, factory.vehicle(user), service_type, future_day, status=AppointmentStatus.COMPLETED
        )
        technician = factory.technician()

        response = client.post(
            f"/admin/appointments/{appointment.id}/assign-technician",
            json={"technician_id": technician.id},
        )

        assert response.status_code == 200
        assert response.json()["technician"]["id"] == technician.id
        assert response.json()["status"]["value"] == "completed"
        assert response.json()["updated_at"] is not None

    def test_assign_unknown_technician(self, client, factory, login, pending):
        login(factory.admin())

        response = client.post(
            f"/admin/appointments/{pending.id}/assign-technician", json={"technician_id": 999}
        )

        assert response.status_code == 404

    @pytest.mark.parametrize("action", ["approve", "assign-technician"])
    def test_staffing_a_booked_technician_is_not_checked(
        self, client, factory, login, pending, service_type, action, monkeypatch
    ):
        login(factory.admin())
        technician = factory.technician()
        other = factory.user()
        factory.appointment(
            other,
            factory.vehicle(other),
            service_type,
            pending.appointment_date,
            pending.appointment_time,
            technician_id=technician.id,
        )
        locked = []
        monkeypatch.setattr(availability, "lock_slot", lambda *args: locked.append(args))

        response = client.post(
            f"/admin/appointments/{pending.id}/{action}", json={"technician_id": technician.id}
        )

        assert response.status_code == 200
        assert response.json()["technician"]["id"] == technician.id
        assert locked == []

    def test_detail_lists_available_technicians(self, client, factory, login, pending, service_type):
        login(factory.admin())
        free = factory.technician(first_name="Ali")
        busy = factory.technician(first_name="Emre")
        factory.technician(first_name="Late", work_start_time=time(11, 0), work_end_time=time(19, 0))
        user = factory.user()
        factory.appointment(
            user,
            factory.vehicle(user),
            service_type,
            pending.appointment_date,
            pending.appointment_time,
            technician_id=busy.id,
        )

        detail = client.get(f"/admin/appointments/{pending.id}").json()
        listed = client.get(f"/admin/appointments/{pending.id}/available-technicians").json()

        assert [t["id"] for t in detail["available_technicians"]] == [free.id]
        assert [t["id"] for t in listed] == [free.id]

    def test_pending_and_today_lists(self, client, factory, login, pending, service_type):
        login(factory.admin())
        user = factory.user()
        todays = factory.appointment(
            user,
            factory.vehicle(user),
            service_type,
            date.today(),
            time(16, 0),
            status=AppointmentStatus.CONFIRMED,
        )

        pending_ids = [a["id"] for a in client.get("/admin/appointments/pending").json()]
        today_ids = [a["id"] for a in client.get("/admin/appointments/today").json()]

        assert pending_ids == [pending.id]
        assert today_ids == [todays.id]

    def test_admin_list_uses_larger_pages(self, client, factory, login, pending):
        login(factory.admin())

        data = client.get("/admin/appointments").json()

        assert data["page_size"] == 15
        assert data["total"] == 1
        assert data["items"][0]["customer"]["email"] == pending.user.email

    def test_customer_cannot_use_admin_routes(self, client, factory, login, pending):
        login(factory.user())

        assert client.get("/admin/appointments").status_code == 403
        assert client.post(f"/admin/appointments/{pending.id}/approve").status_code == 403
