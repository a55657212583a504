from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy import select

from venuebook.models.booking import Booking
from venuebook.models.booking_action import BookingAction
from venuebook.services.booking_service import complete_past_bookings


@pytest.fixture
def package_id(client):
    r = client.post("/api/admin/packages", json={"name": "Grand Package", "price": 40000, "max_guests": 300})
    assert r.status_code == 201, r.text
    return r.json()["id"]


def manual(day: date, **overrides):
    data = {
        "full_name": "Meera Nair",
        "mobile": "9123456780",
        "booking_date": day.isoformat(),
        "slot": "short_duration",
        "start_time": "11:00",
        "end_time": "13:00",
        "guest_count": 60,
    }
    data.update(overrides)
    return data


def test_packages_crud(client, package_id):
    r = client.post("/api/admin/packages", json={"name": "Grand Package", "price": 1})
    assert r.status_code == 409

    r = client.patch(f"/api/admin/packages/{package_id}", json={"is_active": False})
    assert r.status_code == 200
    assert r.json()["is_active"] is False

    assert client.get("/api/public/packages").json() == []
    assert len(client.get("/api/admin/packages").json()) == 1

    assert client.patch("/api/admin/packages/missing", json={"price": 10}).status_code == 404


def test_manual_booking_with_custom_times_and_extras(client, package_id, future_day):
    r = client.post(
        "/api/admin/bookings",
        json=manual(future_day, package_id=package_id, garbage_bags=1, plates_small=100, admin_price_adjustment=-500),
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "confirmed"
    assert body["confirmed_at"] is not None
    assert body["time_slot"] == "short_duration"
    assert (body["start_time"], body["end_time"]) == ("11:00", "13:00")
    assert body["final_price"] == 43000.0

    actions = client.get(f"/api/admin/bookings/{body['id']}/actions").json()
    assert [a["action"] for a in actions] == ["booking_created"]
    assert actions[0]["actor"] == "admin"


def test_manual_booking_is_conflict_checked(client, future_day):
    assert client.post("/api/admin/bookings", json=manual(future_day)).status_code == 201
    r = client.post("/api/admin/bookings", json=manual(future_day, start_time="12:00", end_time="15:00"))
    assert r.status_code == 409


def test_status_changes(client, future_day):
    booking_id = client.post("/api/admin/bookings", json=manual(future_day, status="pending")).json()["id"]

    r = client.post(f"/api/admin/bookings/{booking_id}/confirm")
    assert r.json()["status"] == "confirmed"

    r = client.post(f"/api/admin/bookings/{booking_id}/cancel", json={"reason": "Customer request"})
    assert r.json()["status"] == "cancelled"
    assert r.json()["cancel_reason"] == "Customer request"

    assert client.post(f"/api/admin/bookings/{booking_id}/confirm").status_code == 409

    # Its slot was taken while cancelled, so it cannot come back
    assert client.post("/api/admin/bookings", json=manual(future_day)).status_code == 201
    r = client.patch(f"/api/admin/bookings/{booking_id}/status", json={"status": "pending"})
    assert r.status_code == 409

    actions = client.get(f"/api/admin/bookings/{booking_id}/actions").json()
    assert sorted(a["action"] for a in actions) == ["booking_created", "status_changed", "status_changed"]


def test_update_details_rechecks_and_reprices(client, package_id, future_day):
    booking_id = client.post("/api/admin/bookings", json=manual(future_day, package_id=package_id)).json()["id"]
    client.post("/api/admin/bookings", json=manual(future_day, slot="night", start_time=None, end_time=None))

    # Overlapping its own old range is fine
    r = client.patch(f"/api/admin/bookings/{booking_id}", json={"time_slot": "short_duration", "start_time": "12:00", "end_time": "14:00"})
    assert r.status_code == 200, r.text
    assert (r.json()["start_time"], r.json()["end_time"]) == ("12:00", "14:00")

    r = client.patch(f"/api/admin/bookings/{booking_id}", json={"time_slot": "full_day", "garbage_bags": 2})
    assert r.status_code == 200
    assert r.json()["final_price"] == 40000 + 3000 + 500

    r = client.patch(f"/api/admin/bookings/{booking_id}", json={"start_time": "17:00", "end_time": "20:00"})
    assert r.status_code == 409

    r = client.patch(f"/api/admin/bookings/{booking_id}", json={"start_time": "15:00", "end_time": "12:00"})
    assert r.status_code == 400


def test_list_and_filter(client, future_day):
    client.post("/api/admin/bookings", json=manual(future_day))
    client.post("/api/admin/bookings", json=manual(future_day + timedelta(days=1), full_name="Kiran Das", status="pending"))

    assert len(client.get("/api/admin/bookings").json()) == 2
    assert [b["full_name"] for b in client.get("/api/admin/bookings", params={"status": "pending"}).json()] == ["Kiran Das"]
    assert len(client.get("/api/admin/bookings", params={"q": "meera"}).json()) == 1
    assert len(client.get("/api/admin/bookings", params={"from_date": (future_day + timedelta(days=1)).isoformat()}).json()) == 1
    assert client.get("/api/admin/bookings/nope").status_code == 404


def test_block_and_unblock(client, future_day):
    r = client.post("/api/admin/calendar/block", json={"date": future_day.isoformat(), "reason": "Maintenance"})
    assert r.status_code == 200
    assert r.json()["event_name"] == "Blocked: Maintenance"

    # Blocking twice keeps one event
    again = client.post("/api/admin/calendar/block", json={"date": future_day.isoformat()})
    assert again.json()["id"] == r.json()["id"]

    r = client.post(
        "/api/public/bookings",
        json={"full_name": "Ravi Kumar", "mobile": "9876543210", "booking_date": future_day.isoformat(), "slot": "night", "guest_count": 10},
    )
    assert r.status_code == 409
    assert r.json()["detail"] == "Date is blocked"

    grid = client.get(f"/api/admin/calendar/{future_day.year}/{future_day.month}").json()["days"]
    day = next(d for d in grid if d["date"] == future_day.isoformat())
    assert day["status"] == "blocked"
    assert day["public_status"] == "full"

    assert client.delete(f"/api/admin/calendar/block/{future_day.isoformat()}").status_code == 200
    assert client.delete(f"/api/admin/calendar/block/{future_day.isoformat()}").status_code == 404


def test_admin_calendar_and_day_view(client, future_day):
    client.post("/api/admin/bookings", json=manual(future_day, slot="morning", start_time=None, end_time=None, status="pending"))
    client.post("/api/admin/bookings", json=manual(future_day, slot="evening", start_time=None, end_time=None))

    grid = client.get(f"/api/admin/calendar/{future_day.year}/{future_day.month}").json()["days"]
    day = next(d for d in grid if d["date"] == future_day.isoformat())
    assert day["status"] == "booked"
    assert day["public_status"] == "full"
    assert (day["confirmed"], day["pending"], day["bookings"]) == (1, 1, 2)
    assert day["slots"]["morning"] and day["slots"]["evening"]
    assert day["labels"] == ["Morning (10:00 AM - 2:00 PM)", "Evening (2:00 PM - 6:00 PM)"]

    r = client.get(f"/api/admin/calendar/day/{future_day.isoformat()}")
    assert r.status_code == 200
    assert r.json()["status"] == "booked"
    assert [b["start_time"] for b in r.json()["bookings"]] == ["10:00", "14:00"]


def test_admin_key(client, settings, monkeypatch):
    monkeypatch.setattr(settings, "admin_api_key", "s3cret")

    assert client.get("/api/admin/bookings").status_code == 401
    assert client.get("/api/admin/bookings", headers={"X-Admin-Key": "wrong"}).status_code == 401
    assert client.get("/api/admin/bookings", headers={"X-Admin-Key": "s3cret"}).status_code == 200


def test_complete_past_bookings(db_session):
    today = date(2030, 6, 15)
    db_session.add_all(
        [
            Booking(full_name="Old", mobile="9000000000", guest_count=10, booking_date=today - timedelta(days=1), start_time="10:00", end_time="14:00", status="confirmed"),
            Booking(full_name="Pending", mobile="9000000001", guest_count=10, booking_date=today - timedelta(days=1), start_time="14:00", end_time="18:00", status="pending"),
            Booking(full_name="Today", mobile="9000000002", guest_count=10, booking_date=today, start_time="10:00", end_time="14:00", status="confirmed"),
        ]
    )
    db_session.commit()

    assert complete_past_bookings(db_session, today=today) == 1
    statuses = {b.full_name: b.status for b in db_session.query(Booking).all()}
    assert statuses == {"Old": "completed", "Pending": "pending", "Today": "confirmed"}


def test_slot_with_explicit_times_resolves_the_same_on_create_and_update(client, future_day):
    created = client.post("/api/admin/bookings", json=manual(future_day, slot="morning", start_time="18:00", end_time="22:00")).json()
    assert (created["time_slot"], created["start_time"], created["end_time"]) == ("night", "18:00", "22:00")

    other = client.post("/api/admin/bookings", json=manual(future_day + timedelta(days=1), slot="evening", start_time=None, end_time=None)).json()
    r = client.patch(f"/api/admin/bookings/{other['id']}", json={"time_slot": "morning", "start_time": "18:00", "end_time": "22:00"})
    assert r.status_code == 200
    assert (r.json()["time_slot"], r.json()["start_time"], r.json()["end_time"]) == ("night", "18:00", "22:00")

    r = client.patch(f"/api/admin/bookings/{other['id']}", json={"time_slot": "night", "start_time": "22:00", "end_time": "18:00"})
    assert r.status_code == 400
    assert r.json()["code"] == "start_not_before_end"


def test_package_changes_are_audited(client, db_session, package_id):
    client.patch(f"/api/admin/packages/{package_id}", json={"price": 45000})

    rows = db_session.execute(select(BookingAction)).scalars().all()
    assert sorted(a.action for a in rows) == ["package_created", "package_updated"]
    assert all(a.details_json["package_id"] == package_id for a in rows)
