from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from venuebook.core.config import get_settings
from venuebook.core.deps import get_db
from venuebook.core.errors import BookingValidationError
from venuebook.models.package import Package
from venuebook.schemas.availability import (
    AvailabilityCheckResponse,
    AvailabilityDay,
    AvailabilityResponse,
    PublicCalendarDay,
    PublicCalendarResponse,
    SlotOut,
)
from venuebook.schemas.booking import BookingOut, PublicBookingCreate
from venuebook.schemas.package import PackageOut
from venuebook.services.audit_service import client_ip
from venuebook.services.booking_payload import collect_booking_errors
from venuebook.services.booking_service import create_public_booking
from venuebook.services.calendar_service import check_date, compute_month_grid, compute_range_summary
from venuebook.services.rate_limit import get_public_booking_limiter
from venuebook.services.slots import format_range, list_slots, resolve_booking_times

router = APIRouter()


@router.get("/packages", response_model=list[PackageOut])
def list_public_packages(db: Session = Depends(get_db)):
    return db.execute(select(Package).where(Package.is_active == True).order_by(Package.order_index, Package.name)).scalars().all()


@router.get("/slots", response_model=list[SlotOut])
def list_public_slots():
    return [
        SlotOut(key=s.key, label=s.label, start_time=s.start, end_time=s.end, display=format_range(s.start, s.end))
        for s in list_slots()
    ]


@router.get("/availability", response_model=AvailabilityResponse)
def availability(start_date: date, end_date: date, db: Session = Depends(get_db)):
    summary = compute_range_summary(db, from_date=start_date, to_date=end_date)
    return AvailabilityResponse(days={k: AvailabilityDay(**v) for k, v in summary.items()})


@router.get("/availability/check", response_model=AvailabilityCheckResponse)
def check_availability(
    date: date,
    start_time: str | None = None,
    end_time: str | None = None,
    slot: str | None = None,
    db: Session = Depends(get_db),
):
    _, start, end = resolve_booking_times(slot, start_time, end_time)
    result, _ = check_date(db, booking_date=date, start_time=start, end_time=end)
    return AvailabilityCheckResponse(
        date=date,
        available=result.available,
        has_conflict=result.conflicting,
        blocked=result.blocked,
        existing_bookings=result.booking_count,
        message=result.message,
    )


@router.get("/calendar/{year}/{month}", response_model=PublicCalendarResponse)
def public_calendar(year: int, month: int, db: Session = Depends(get_db)):
    grid = compute_month_grid(db, year=year, month=month)
    return PublicCalendarResponse(
        year=year,
        month=month,
        days=[PublicCalendarDay(date=d.date, in_month=d.in_month, status=d.public_status.value) for d in grid],
    )


@router.post("/bookings", response_model=BookingOut, status_code=201)
def create_booking(payload: PublicBookingCreate, request: Request, db: Session = Depends(get_db)):
    settings = get_settings()
    if settings.public_rate_limit_enabled:
        allowed, _, retry_after = get_public_booking_limiter().hit(client_ip(request) or "unknown")
        if not allowed:
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded. Maximum {settings.public_bookings_per_hour} bookings per hour allowed.",
                headers={"Retry-After": str(retry_after)},
            )

    form = payload.model_dump()
    try:
        return create_public_booking(db, form, request=request)
    except BookingValidationError as exc:
        exc.errors = collect_booking_errors(form) or [exc]
        raise
