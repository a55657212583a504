from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping
from zoneinfo import ZoneInfo

from fastapi import HTTPException, Request
from sqlalchemy import or_, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from venuebook.core.config import get_settings
from venuebook.core.logging_config import get_logger
from venuebook.models.booking import Booking
from venuebook.models.booking_action import BookingAction
from venuebook.models.event import Event
from venuebook.models.package import Package
from venuebook.schemas.booking import AdminBookingUpdate, BookingPayload
from venuebook.services.audit_service import write_booking_action
from venuebook.services.booking_payload import build_booking
from venuebook.services.conflict import ACTIVE_STATUSES, MSG_CONFLICT, Candidate, ConflictResult, check_conflict
from venuebook.services.pricing import calculate_booking_price
from venuebook.services.slots import resolve_booking_times

logger = get_logger("booking")
admin_logger = get_logger("admin")

EXTRA_FIELDS = ("garbage_bags", "plates_small", "plates_large", "cooking_gas_qty", "admin_price_adjustment")


def _utcnow() -> datetime:
    return datetime.now(tz=ZoneInfo("UTC"))


def _lock_date(db: Session, day: date) -> None:
    # Row locks miss concurrent inserts on an empty or part-filled date
    if db.get_bind().dialect.name == "postgresql":
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": day.toordinal()})


def _commit(db: Session) -> None:
    """Commit, mapping the overlap exclusion constraint to a 409."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning(f"Booking rejected by database constraint | {exc.orig}")
        raise HTTPException(status_code=409, detail=MSG_CONFLICT)


def _lock_active_bookings(db: Session, day: date) -> list[Booking]:
    # FOR UPDATE serializes concurrent check-and-insert on the same date (no-op on SQLite)
    q = (
        select(Booking)
        .where(Booking.booking_date == day)
        .where(Booking.status.in_(ACTIVE_STATUSES))
        .with_for_update()
    )
    return list(db.execute(q).scalars().all())


def _blocks_on(db: Session, day: date) -> list[Event]:
    q = select(Event).where(Event.event_date == day, Event.event_type == "blocked", Event.status == "blocked")
    return list(db.execute(q).scalars().all())


def check_availability(
    db: Session,
    *,
    booking_date: date,
    start_time: str,
    end_time: str,
    exclude_booking_id: str | None = None,
) -> ConflictResult:
    settings = get_settings()
    _lock_date(db, booking_date)
    existing = _lock_active_bookings(db, booking_date)
    return check_conflict(
        Candidate(booking_date, start_time, end_time),
        existing,
        _blocks_on(db, booking_date),
        capacity=settings.daily_capacity,
        exclude_booking_id=exclude_booking_id,
    )


def ensure_available(
    db: Session,
    *,
    booking_date: date,
    start_time: str,
    end_time: str,
    exclude_booking_id: str | None = None,
) -> ConflictResult:
    result = check_availability(
        db,
        booking_date=booking_date,
        start_time=start_time,
        end_time=end_time,
        exclude_booking_id=exclude_booking_id,
    )
    if not result.available:
        logger.warning(f"Booking rejected | date={booking_date} | {start_time}-{end_time} | {result.message}")
        raise HTTPException(status_code=409, detail=result.message)
    return result


def _package_price(db: Session, package_id: str | None) -> float:
    if not package_id:
        return 0.0
    package = db.get(Package, package_id)
    if package is None:
        raise HTTPException(status_code=400, detail="Invalid package selected")
    if not package.is_active:
        raise HTTPException(status_code=400, detail=f'Package "{package.name}" is currently unavailable')
    return package.price


def _apply_price(db: Session, booking: Booking) -> None:
    breakdown = calculate_booking_price(
        _package_price(db, booking.package_id),
        garbage_bags=booking.garbage_bags,
        plates_small=booking.plates_small,
        plates_large=booking.plates_large,
        cooking_gas_qty=booking.cooking_gas_qty,
        admin_price_adjustment=booking.admin_price_adjustment,
    )
    booking.final_price = breakdown.final_price


def create_booking(
    db: Session,
    payload: BookingPayload,
    *,
    actor: str = "public",
    extras: Mapping[str, Any] | None = None,
    request: Request | None = None,
) -> Booking:
    """Insert a validated booking after re-checking availability in the same transaction."""
    try:
        ensure_available(db, booking_date=payload.booking_date, start_time=payload.start_time, end_time=payload.end_time)

        booking = Booking(**payload.model_dump())
        for k in EXTRA_FIELDS:
            setattr(booking, k, (extras or {}).get(k) or 0)
        if booking.status == "confirmed":
            booking.confirmed_at = _utcnow()
        _apply_price(db, booking)

        db.add(booking)
        db.flush()

        write_booking_action(
            db,
            action="booking_created",
            booking_id=booking.id,
            actor=actor,
            details={
                "booking_date": payload.booking_date,
                "start_time": payload.start_time,
                "end_time": payload.end_time,
                "guest_count": payload.guest_count,
                "package_id": payload.package_id,
                "status": payload.status,
            },
            request=request,
            commit=False,
        )
        _commit(db)
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info(f"Booking created | id={booking.id} | date={booking.booking_date} | {booking.start_time}-{booking.end_time} | by={actor}")
    return booking


def create_public_booking(db: Session, form: Mapping[str, Any], *, request: Request | None = None) -> Booking:
    payload = build_booking(form)
    return create_booking(db, payload, actor="public", request=request)


def create_admin_booking(db: Session, form: Mapping[str, Any], *, actor: str = "admin", request: Request | None = None) -> Booking:
    payload = build_booking(form, status=form.get("status") or "confirmed")
    booking = create_booking(db, payload, actor=actor, extras=form, request=request)
    admin_logger.info(f"Manual booking | id={booking.id} | date={booking.booking_date} | by={actor}")
    return booking


def get_booking_or_404(db: Session, booking_id: str) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


def set_booking_status(
    db: Session,
    *,
    booking: Booking,
    status: str,
    notes: str = "",
    actor: str = "admin",
    request: Request | None = None,
) -> Booking:
    previous = booking.status
    if previous == status:
        return booking

    # Reactivating a cancelled/completed booking needs its slot back
    if status in ACTIVE_STATUSES and previous not in ACTIVE_STATUSES:
        ensure_available(
            db,
            booking_date=booking.booking_date,
            start_time=booking.start_time,
            end_time=booking.end_time,
            exclude_booking_id=booking.id,
        )

    booking.status = status
    if status == "confirmed":
        booking.confirmed_at = _utcnow()
    elif status == "cancelled":
        booking.cancelled_at = _utcnow()
        booking.cancel_reason = notes[:255]

    write_booking_action(
        db,
        action="status_changed",
        booking_id=booking.id,
        actor=actor,
        notes=notes,
        details={"previous_status": previous, "new_status": status},
        request=request,
        commit=False,
    )
    _commit(db)
    db.refresh(booking)

    admin_logger.info(f"Booking status | id={booking.id} | {previous} -> {status} | by={actor}")
    return booking


def confirm_booking(db: Session, *, booking: Booking, actor: str = "admin", request: Request | None = None) -> Booking:
    if booking.status not in ACTIVE_STATUSES:
        raise HTTPException(status_code=409, detail=f"Cannot confirm a {booking.status} booking")
    return set_booking_status(db, booking=booking, status="confirmed", actor=actor, request=request)


def cancel_booking(db: Session, *, booking: Booking, reason: str = "", actor: str = "admin", request: Request | None = None) -> Booking:
    if booking.status == "cancelled":
        return booking
    return set_booking_status(db, booking=booking, status="cancelled", notes=reason, actor=actor, request=request)


def _resolve_update_times(booking: Booking, payload: AdminBookingUpdate) -> tuple[str | None, str, str]:
    if payload.time_slot:
        return resolve_booking_times(payload.time_slot, payload.start_time, payload.end_time)
    if payload.start_time or payload.end_time:
        return resolve_booking_times(None, payload.start_time or booking.start_time, payload.end_time or booking.end_time)
    return booking.time_slot, booking.start_time, booking.end_time


def update_booking_details(
    db: Session,
    *,
    booking: Booking,
    payload: AdminBookingUpdate,
    actor: str = "admin",
    request: Request | None = None,
) -> Booking:
    data = payload.model_dump(exclude_unset=True)

    slot, start, end = _resolve_update_times(booking, payload)
    new_date = payload.booking_date or booking.booking_date

    moved = (new_date, start, end) != (booking.booking_date, booking.start_time, booking.end_time)
    if moved and booking.status in ACTIVE_STATUSES:
        ensure_available(db, booking_date=new_date, start_time=start, end_time=end, exclude_booking_id=booking.id)

    booking.booking_date = new_date
    booking.time_slot = slot
    booking.start_time = start
    booking.end_time = end

    for k in ("guest_count", "package_id", "event_type", "special_requests", "additional_notes", *EXTRA_FIELDS):
        if k in data and data[k] is not None:
            setattr(booking, k, data[k])
    if "package_id" in data and data["package_id"] is None:
        booking.package_id = None

    _apply_price(db, booking)

    write_booking_action(
        db,
        action="details_updated",
        booking_id=booking.id,
        actor=actor,
        details={"fields": sorted(data.keys()), "final_price": booking.final_price},
        request=request,
        commit=False,
    )
    _commit(db)
    db.refresh(booking)

    admin_logger.info(f"Booking updated | id={booking.id} | fields={sorted(data.keys())} | final_price={booking.final_price} | by={actor}")
    return booking


def list_bookings(
    db: Session,
    *,
    status: str | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
    q: str | None = None,
    package_id: str | None = None,
    limit: int = 1000,
) -> list[Booking]:
    stmt = select(Booking)
    if status and status != "all":
        stmt = stmt.where(Booking.status == status)
    if from_date:
        stmt = stmt.where(Booking.booking_date >= from_date)
    if to_date:
        stmt = stmt.where(Booking.booking_date <= to_date)
    if package_id:
        stmt = stmt.where(Booking.package_id == package_id)
    if q:
        like = f"%{q}%"
        stmt = stmt.where(or_(Booking.full_name.ilike(like), Booking.mobile.ilike(like), Booking.email.ilike(like)))
    stmt = stmt.order_by(Booking.booking_date.asc(), Booking.start_time.asc())
    return list(db.execute(stmt.limit(limit)).scalars().all())


def list_booking_actions(db: Session, booking_id: str) -> list[BookingAction]:
    q = select(BookingAction).where(BookingAction.booking_id == booking_id).order_by(BookingAction.created_at.desc())
    return list(db.execute(q).scalars().all())


def complete_past_bookings(db: Session, *, today: date) -> int:
    """Mark confirmed bookings dated before ``today`` as completed."""
    q = select(Booking).where(Booking.status == "confirmed", Booking.booking_date < today)
    targets = list(db.execute(q).scalars().all())

    for b in targets:
        b.status = "completed"
        write_booking_action(
            db,
            action="auto_completed",
            booking_id=b.id,
            actor="system",
            details={"booking_date": b.booking_date},
            commit=False,
        )
    db.commit()

    if targets:
        logger.info(f"Bookings completed | count={len(targets)} | before={today}")
    return len(targets)
