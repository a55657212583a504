from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from venuebook.core.deps import get_db, require_admin
from venuebook.schemas.availability import AdminCalendarDay, AdminCalendarResponse, DayBookingsResponse
from venuebook.schemas.booking import BookingOut
from venuebook.schemas.event import BlockDateCreate, EventOut
from venuebook.services.calendar_service import block_date, compute_month_grid, day_overview, unblock_date

router = APIRouter()


@router.get("/day/{day}", response_model=DayBookingsResponse)
def admin_day(day: date, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    classification, bookings = day_overview(db, day=day)
    return DayBookingsResponse(date=day, status=classification.admin_status.value, bookings=[BookingOut.model_validate(b) for b in bookings])


@router.get("/{year}/{month}", response_model=AdminCalendarResponse)
def admin_calendar(year: int, month: int, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    days = []
    for d in compute_month_grid(db, year=year, month=month):
        c = d.classification
        days.append(
            AdminCalendarDay(
                date=d.date,
                in_month=d.in_month,
                status=d.admin_status.value,
                public_status=d.public_status.value,
                bookings=c.booking_count,
                confirmed=c.confirmed_count,
                pending=c.pending_count,
                total_guests=c.total_guests,
                slots=dict(c.slot_flags),
                labels=c.labels,
            )
        )
    return AdminCalendarResponse(year=year, month=month, days=days)


@router.post("/block", response_model=EventOut)
def block(payload: BlockDateCreate, request: Request, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    return block_date(db, day=payload.date, reason=payload.reason, actor=actor, request=request)


@router.delete("/block/{day}")
def unblock(day: date, request: Request, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    unblock_date(db, day=day, actor=actor, request=request)
    return {"ok": True}
