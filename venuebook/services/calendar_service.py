from __future__ import annotations

from datetime import date

from fastapi import HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from venuebook.core.config import get_settings
from venuebook.core.logging_config import get_logger
from venuebook.models.booking import Booking
from venuebook.models.event import Event
from venuebook.services.audit_service import write_booking_action
from venuebook.services.conflict import ACTIVE_STATUSES, Candidate, ConflictResult, check_conflict
from venuebook.services.day_status import DayClassification, classify_day
from venuebook.services.month_grid import CalendarDay, build_month_grid, grid_bounds, summarize_range

admin_logger = get_logger("admin")


def load_snapshot(db: Session, *, from_date: date, to_date: date) -> tuple[list[Booking], list[Event]]:
    """Active bookings and block events dated within ``[from_date, to_date]``."""
    bookings = db.execute(
        select(Booking).where(
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.booking_date >= from_date,
            Booking.booking_date <= to_date,
        )
    ).scalars().all()

    events = db.execute(
        select(Event).where(
            Event.event_type == "blocked",
            Event.status == "blocked",
            Event.event_date >= from_date,
            Event.event_date <= to_date,
        )
    ).scalars().all()

    return list(bookings), list(events)


def compute_month_grid(db: Session, *, year: int, month: int) -> list[CalendarDay]:
    try:
        first, last = grid_bounds(year, month)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    bookings, events = load_snapshot(db, from_date=first, to_date=last)
    return build_month_grid(year, month, bookings, events, capacity=get_settings().daily_capacity)


def compute_range_summary(db: Session, *, from_date: date, to_date: date) -> dict[str, dict]:
    settings = get_settings()
    if from_date > to_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    if (to_date - from_date).days >= settings.max_range_days:
        raise HTTPException(status_code=400, detail=f"Date range must not exceed {settings.max_range_days} days")
    bookings, events = load_snapshot(db, from_date=from_date, to_date=to_date)
    return summarize_range(from_date, to_date, bookings, events, capacity=settings.daily_capacity)


def check_date(db: Session, *, booking_date: date, start_time: str, end_time: str) -> tuple[ConflictResult, list[Booking]]:
    bookings, events = load_snapshot(db, from_date=booking_date, to_date=booking_date)
    result = check_conflict(
        Candidate(booking_date, start_time, end_time),
        bookings,
        events,
        capacity=get_settings().daily_capacity,
    )
    return result, bookings


def find_block(db: Session, day: date) -> Event | None:
    q = select(Event).where(Event.event_date == day, Event.event_type == "blocked", Event.status == "blocked").limit(1)
    return db.execute(q).scalars().first()


def block_date(db: Session, *, day: date, reason: str = "", actor: str = "admin", request: Request | None = None) -> Event:
    existing = find_block(db, day)
    if existing is not None:
        return existing

    event = Event(
        event_date=day,
        event_type="blocked",
        status="blocked",
        event_name=f"Blocked: {reason or 'Manual Block'}",
        description=reason or "Date manually blocked by admin",
    )
    db.add(event)
    write_booking_action(
        db,
        action="block_date",
        actor=actor,
        notes=f"Blocked date: {day.isoformat()}. Reason: {reason or 'No reason provided'}",
        details={"date": day},
        request=request,
        commit=False,
    )
    db.commit()
    db.refresh(event)

    admin_logger.info(f"Date blocked | date={day} | by={actor}")
    return event


def unblock_date(db: Session, *, day: date, actor: str = "admin", request: Request | None = None) -> None:
    event = find_block(db, day)
    if event is None:
        raise HTTPException(status_code=404, detail="No blocked event found for this date")

    db.delete(event)
    write_booking_action(
        db,
        action="unblock_date",
        actor=actor,
        notes=f"Unblocked date: {day.isoformat()}",
        details={"date": day},
        request=request,
        commit=False,
    )
    db.commit()

    admin_logger.info(f"Date unblocked | date={day} | by={actor}")


def day_overview(db: Session, *, day: date) -> tuple[DayClassification, list[Booking]]:
    bookings, events = load_snapshot(db, from_date=day, to_date=day)
    bookings.sort(key=lambda b: (b.start_time, b.end_time))
    return classify_day(day, bookings, events, capacity=get_settings().daily_capacity), bookings
