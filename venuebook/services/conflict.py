"""Slot conflict and daily capacity checks.

Pure functions over a snapshot of bookings and events supplied by the caller.
The result is advisory: only the storage layer can make check-and-insert
atomic (see ``booking_service.create_booking``).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from venuebook.services.slots import normalize_time_string

ACTIVE_STATUSES = frozenset({"pending", "confirmed"})
DEFAULT_CAPACITY = 2

MSG_AVAILABLE = "Date is available"
MSG_CONFLICT = "Time slot conflict detected"
MSG_FULL = "Date is fully booked"
MSG_BLOCKED = "Date is blocked"


@dataclass(frozen=True)
class Candidate:
    booking_date: date
    start_time: str
    end_time: str


@dataclass(frozen=True)
class ConflictResult:
    available: bool
    conflicting: bool
    booking_count: int
    blocked: bool = False
    message: str = MSG_AVAILABLE


def overlaps(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Half-open ``[start, end)`` overlap; ranges sharing a boundary do not overlap."""
    return start_a < end_b and start_b < end_a


def is_active(booking: Any) -> bool:
    return getattr(booking, "status", None) in ACTIVE_STATUSES


def is_block(event: Any) -> bool:
    return getattr(event, "event_type", None) == "blocked" and getattr(event, "status", None) == "blocked"


def is_date_blocked(day: date, events: Iterable[Any]) -> bool:
    return any(is_block(e) and e.event_date == day for e in events)


def active_bookings_on(day: date, bookings: Iterable[Any], *, exclude_booking_id: str | None = None) -> list[Any]:
    return [
        b
        for b in bookings
        if b.booking_date == day and is_active(b) and (exclude_booking_id is None or getattr(b, "id", None) != exclude_booking_id)
    ]


def booking_overlaps(booking: Any, start: str, end: str) -> bool:
    b_start = normalize_time_string(booking.start_time)
    b_end = normalize_time_string(booking.end_time)
    if not b_start or not b_end:
        return False
    return overlaps(start, end, b_start, b_end)


def check_conflict(
    candidate: Candidate,
    existing: Iterable[Any],
    events: Iterable[Any] = (),
    *,
    capacity: int = DEFAULT_CAPACITY,
    exclude_booking_id: str | None = None,
) -> ConflictResult:
    """Decide whether ``candidate`` can be accepted on its date.

    ``existing`` and ``events`` may span several dates; only rows on the
    candidate's date are considered. A blocked date is never available.
    """
    day = candidate.booking_date
    same_day = active_bookings_on(day, existing, exclude_booking_id=exclude_booking_id)
    count = len(same_day)

    if is_date_blocked(day, events):
        return ConflictResult(available=False, conflicting=False, booking_count=count, blocked=True, message=MSG_BLOCKED)

    start = normalize_time_string(candidate.start_time)
    end = normalize_time_string(candidate.end_time)
    conflicting = any(booking_overlaps(b, start, end) for b in same_day)

    available = count == 0 or (not conflicting and count < capacity)

    if available:
        message = MSG_AVAILABLE
    elif conflicting:
        message = MSG_CONFLICT
    else:
        message = MSG_FULL

    return ConflictResult(available=available, conflicting=conflicting, booking_count=count, message=message)
