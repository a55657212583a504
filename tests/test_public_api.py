from __future__ import annotations

from datetime import date, timedelta

import pytest

from venuebook.models.package import Package


@pytest.fixture
def package(db_session):
    p = Package(name="Classic Hall", price=25000.0, description="Hall with basic seating")
    db_session.add(p)
    db_session.commit()
    return p


def submission(day: date, **overrides):
    data = {
        "full_name": "Ravi Kumar",
        "mobile": "9876543210",
        "email": "ravi.kumar@gmail.com",
        "booking_date": day.isoformat(),
        "slot": "morning",
        "guest_count": 150,
        "event_type": "birthday",
    }
    data.update(overrides)
    return data


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_packages_and_slots(client, package):
    r = client.get("/api/public/packages")
    assert r.status_code == 200
    assert [p["name"] for p in r.json()] == ["Classic Hall"]

    slots = client.get("/api/public/slots").json()
    keys = [s["key"] for s in slots]
    assert "morning" in keys and "short_duration" not in keys
    morning = next(s for s in slots if s["key"] == "morning")
    assert morning["display"] == "10:00 AM - 2:00 PM"


def test_booking_flow(client, package, future_day):
    r = client.post("/api/public/bookings", json=submission(future_day, package_id=package.id))
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "pending"
    assert (body["start_time"], body["end_time"]) == ("10:00", "14:00")
    assert body["final_price"] == 28000.0

    r = client.post("/api/public/bookings", json=submission(future_day, slot="full_day"))
    assert r.status_code == 409
    assert r.json()["detail"] == "Time slot conflict detected"

    r = client.post("/api/public/bookings", json=submission(future_day, slot="evening"))
    assert r.status_code == 201

    r = client.post("/api/public/bookings", json=submission(future_day, slot="night"))
    assert r.status_code == 409
    assert r.json()["detail"] == "Date is fully booked"


def test_validation_errors_are_listed(client):
    past = date.today() - timedelta(days=2)
    r = client.post("/api/public/bookings", json=submission(past, full_name="R", guest_count=0))
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "missing_field"
    assert [e["field"] for e in body["errors"]] == ["full_name", "booking_date", "guest_count"]


def test_unknown_slot(client, future_day):
    r = client.post("/api/public/bookings", json=submission(future_day, slot="brunch"))
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid slot: brunch"


def test_unknown_package(client, future_day):
    r = client.post("/api/public/bookings", json=submission(future_day, package_id="3f2b6c1e-8a4d-4b7e-9c2a-1d5e6f7a8b9c"))
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid package selected"


def test_availability_check(client, future_day):
    client.post("/api/public/bookings", json=submission(future_day))

    r = client.get("/api/public/availability/check", params={"date": future_day.isoformat(), "slot": "evening"})
    assert r.status_code == 200
    assert r.json()["available"] is True
    assert r.json()["existing_bookings"] == 1

    r = client.get(
        "/api/public/availability/check",
        params={"date": future_day.isoformat(), "start_time": "13:00", "end_time": "15:00"},
    )
    assert r.json()["has_conflict"] is True
    assert r.json()["available"] is False

    r = client.get("/api/public/availability/check", params={"date": future_day.isoformat()})
    assert r.status_code == 400


def test_availability_range(client, future_day):
    client.post("/api/public/bookings", json=submission(future_day, guest_count=75))

    r = client.get(
        "/api/public/availability",
        params={"start_date": (future_day - timedelta(days=3)).isoformat(), "end_date": (future_day + timedelta(days=3)).isoformat()},
    )
    assert r.status_code == 200
    days = r.json()["days"]
    assert list(days) == [future_day.isoformat()]
    assert days[future_day.isoformat()]["status"] == "partial"
    assert days[future_day.isoformat()]["total_guests"] == 75

    r = client.get("/api/public/availability", params={"start_date": "2030-06-10", "end_date": "2030-06-01"})
    assert r.status_code == 400


def test_public_calendar(client, future_day):
    client.post("/api/public/bookings", json=submission(future_day, slot="full_day"))

    r = client.get(f"/api/public/calendar/{future_day.year}/{future_day.month}")
    assert r.status_code == 200
    days = r.json()["days"]
    assert len(days) % 7 == 0
    statuses = {d["date"]: d["status"] for d in days}
    assert statuses[future_day.isoformat()] == "full"
    assert set(days[0]) == {"date", "in_month", "status"}

    assert client.get("/api/public/calendar/2030/13").status_code == 400


def test_rate_limit(client, settings, monkeypatch, future_day):
    monkeypatch.setattr(settings, "public_rate_limit_enabled", True)

    for _ in range(settings.public_bookings_per_hour):
        r = client.post("/api/public/bookings", json=submission(future_day, full_name=""))
        assert r.status_code == 400

    r = client.post("/api/public/bookings", json=submission(future_day))
    assert r.status_code == 429
    assert "Retry-After" in r.headers


@pytest.mark.parametrize(
    "start,end,code",
    [
        ("18:00", "10:00", "start_not_before_end"),
        ("zz", "zzz", "invalid_time_format"),
        ("9", "99", "invalid_time_format"),
    ],
)
def test_availability_check_validates_times(client, future_day, start, end, code):
    client.post("/api/public/bookings", json=submission(future_day, slot="full_day"))

    r = client.get(
        "/api/public/availability/check",
        params={"date": future_day.isoformat(), "start_time": start, "end_time": end},
    )
    assert r.status_code == 400
    assert r.json()["code"] == code


def test_availability_check_explicit_times_win_over_slot(client, future_day):
    client.post("/api/public/bookings", json=submission(future_day, slot="morning"))

    r = client.get(
        "/api/public/availability/check",
        params={"date": future_day.isoformat(), "slot": "morning", "start_time": "18:00", "end_time": "22:00"},
    )
    assert r.json()["available"] is True
    assert r.json()["has_conflict"] is False


def test_availability_range_edges(client):
    r = client.get("/api/public/availability", params={"start_date": "9999-12-31", "end_date": "9999-12-31"})
    assert r.status_code == 200
    assert r.json()["days"] == {}

    r = client.get("/api/public/availability", params={"start_date": "0001-01-01", "end_date": "9999-12-31"})
    assert r.status_code == 400


def test_invalid_email_is_a_listed_validation_error(client, future_day):
    r = client.post("/api/public/bookings", json=submission(future_day, email="ravi@", guest_count=0))
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "invalid_email"
    assert [e["field"] for e in body["errors"]] == ["email", "guest_count"]


def test_slot_with_explicit_times_is_stored_by_range(client, future_day):
    r = client.post("/api/public/bookings", json=submission(future_day, slot="morning", start_time="18:00", end_time="22:00"))
    assert r.status_code == 201
    assert (r.json()["time_slot"], r.json()["start_time"], r.json()["end_time"]) == ("night", "18:00", "22:00")
