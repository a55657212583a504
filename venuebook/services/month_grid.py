from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Mapping

from venuebook.services.conflict import DEFAULT_CAPACITY
from venuebook.services.day_status import AdminStatus, DayClassification, PublicStatus, classify_day

# Weeks start on Sunday
_calendar = calendar.Calendar(firstweekday=calendar.SUNDAY)


@dataclass(frozen=True)
class CalendarDay:
    date: date
    in_month: bool
    classification: DayClassification

    @property
    def public_status(self) -> PublicStatus:
        return self.classification.public_status

    @property
    def admin_status(self) -> AdminStatus:
        return self.classification.admin_status


def _check_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    if not 1 <= year <= 9998:
        raise ValueError(f"Invalid year: {year}")


def month_dates(year: int, month: int) -> list[date]:
    """All dates shown for ``year``/``month``, padded to whole Sunday-start weeks."""
    _check_month(year, month)
    return [d for week in _calendar.monthdatescalendar(year, month) for d in week]


def grid_bounds(year: int, month: int) -> tuple[date, date]:
    dates = month_dates(year, month)
    return dates[0], dates[-1]


def _by_date(rows: Iterable[Any], attr: str) -> dict[date, list[Any]]:
    grouped: dict[date, list[Any]] = defaultdict(list)
    for row in rows:
        grouped[getattr(row, attr)].append(row)
    return grouped


def build_month_grid(
    year: int,
    month: int,
    bookings: Iterable[Any],
    events: Iterable[Any] = (),
    *,
    capacity: int = DEFAULT_CAPACITY,
    slot_flags_by_date: Mapping[date, Mapping[str, bool]] | None = None,
) -> list[CalendarDay]:
    bookings_by_day = _by_date(bookings, "booking_date")
    events_by_day = _by_date(events, "event_date")
    flags = slot_flags_by_date or {}

    grid = []
    for d in month_dates(year, month):
        classification = classify_day(
            d,
            bookings_by_day.get(d, ()),
            events_by_day.get(d, ()),
            capacity=capacity,
            slot_flags=flags.get(d),
        )
        grid.append(CalendarDay(date=d, in_month=d.month == month, classification=classification))
    return grid


def summarize_range(
    start: date,
    end: date,
    bookings: Iterable[Any],
    events: Iterable[Any] = (),
    *,
    capacity: int = DEFAULT_CAPACITY,
) -> dict[str, dict]:
    """Availability map keyed by ISO date, for dates that have bookings or a block."""
    if start > end:
        raise ValueError("start_date must not be after end_date")

    bookings_by_day = _by_date(bookings, "booking_date")
    events_by_day = _by_date(events, "event_date")

    summary: dict[str, dict] = {}
    # date.max has no successor, so never step past ``end``
    for offset in range((end - start).days + 1):
        d = start + timedelta(days=offset)
        c = classify_day(d, bookings_by_day.get(d, ()), events_by_day.get(d, ()), capacity=capacity)
        if c.booking_count or c.blocked:
            summary[d.isoformat()] = {
                "date": d,
                "bookings": c.booking_count,
                "total_guests": c.total_guests,
                "status": c.public_status.value,
                "blocked": c.blocked,
                "time_slots": [{"start": r.start_time, "end": r.end_time, "guests": r.guest_count} for r in c.ranges],
            }
    return summary
