from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from venuebook.core.deps import get_db, require_admin
from venuebook.core.errors import BookingValidationError
from venuebook.schemas.booking import (
    AdminBookingCreate,
    AdminBookingOut,
    AdminBookingUpdate,
    BookingActionOut,
    BookingCancel,
    BookingStatusUpdate,
)
from venuebook.services.booking_payload import collect_booking_errors
from venuebook.services.booking_service import (
    cancel_booking,
    confirm_booking,
    create_admin_booking,
    get_booking_or_404,
    list_booking_actions,
    list_bookings,
    set_booking_status,
    update_booking_details,
)

router = APIRouter()


@router.get("", response_model=list[AdminBookingOut])
def list_all_bookings(
    status: str | None = None,
    from_date: date | None = Query(default=None),
    to_date: date | None = Query(default=None),
    q: str | None = None,
    package_id: str | None = None,
    db: Session = Depends(get_db),
    actor: str = Depends(require_admin),
):
    return list_bookings(db, status=status, from_date=from_date, to_date=to_date, q=q, package_id=package_id)


@router.post("", response_model=AdminBookingOut, status_code=201)
def create_manual_booking(payload: AdminBookingCreate, request: Request, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    form = payload.model_dump()
    try:
        return create_admin_booking(db, form, actor=actor, request=request)
    except BookingValidationError as exc:
        exc.errors = collect_booking_errors(form) or [exc]
        raise


@router.get("/{booking_id}", response_model=AdminBookingOut)
def get_booking(booking_id: str, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    return get_booking_or_404(db, booking_id)


@router.get("/{booking_id}/actions", response_model=list[BookingActionOut])
def get_booking_actions(booking_id: str, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    get_booking_or_404(db, booking_id)
    return list_booking_actions(db, booking_id)


@router.patch("/{booking_id}", response_model=AdminBookingOut)
def update_booking(booking_id: str, payload: AdminBookingUpdate, request: Request, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    booking = get_booking_or_404(db, booking_id)
    return update_booking_details(db, booking=booking, payload=payload, actor=actor, request=request)


@router.post("/{booking_id}/confirm", response_model=AdminBookingOut)
def confirm(booking_id: str, request: Request, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    booking = get_booking_or_404(db, booking_id)
    return confirm_booking(db, booking=booking, actor=actor, request=request)


@router.post("/{booking_id}/cancel", response_model=AdminBookingOut)
def cancel(booking_id: str, request: Request, payload: BookingCancel | None = None, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    booking = get_booking_or_404(db, booking_id)
    reason = payload.reason if payload else ""
    return cancel_booking(db, booking=booking, reason=reason, actor=actor, request=request)


@router.patch("/{booking_id}/status", response_model=AdminBookingOut)
def change_status(booking_id: str, payload: BookingStatusUpdate, request: Request, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    booking = get_booking_or_404(db, booking_id)
    return set_booking_status(db, booking=booking, status=payload.status, notes=payload.notes, actor=actor, request=request)
