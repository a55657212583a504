"""Turns a raw booking form into a canonical :class:`BookingPayload`.

Rules run in a fixed order and ``build_booking`` stops at the first failure so
the message a submitter sees is deterministic. ``collect_booking_errors`` runs
the same rules eagerly for form display.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Callable, Mapping
from zoneinfo import ZoneInfo

from email_validator import EmailNotValidError, validate_email

from venuebook.core.config import get_settings
from venuebook.core.errors import (
    BookingValidationError,
    InvalidDateFormat,
    InvalidEmail,
    InvalidGuestCount,
    InvalidPackageReference,
    MissingField,
    PastDate,
)
from venuebook.schemas.booking import BookingPayload
from venuebook.services.slots import resolve_booking_times

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)

MIN_NAME_LENGTH = 2
MIN_MOBILE_DIGITS = 10


def local_today() -> date:
    return datetime.now(tz=ZoneInfo(get_settings().timezone)).date()


def _text(form: Mapping[str, Any], key: str) -> str:
    value = form.get(key)
    return str(value).strip() if value is not None else ""


def _optional_text(form: Mapping[str, Any], key: str) -> str | None:
    return _text(form, key) or None


def _validate_full_name(form: Mapping[str, Any], today: date) -> str:
    name = _text(form, "full_name")
    if len(name) < MIN_NAME_LENGTH:
        raise MissingField("Full name is required (minimum 2 characters)", field="full_name")
    return name


def _validate_mobile(form: Mapping[str, Any], today: date) -> str:
    mobile = _text(form, "mobile")
    if sum(ch.isdigit() for ch in mobile) < MIN_MOBILE_DIGITS:
        raise MissingField("Valid mobile number is required (minimum 10 digits)", field="mobile")
    return mobile


def _validate_booking_date(form: Mapping[str, Any], today: date) -> date:
    raw = form.get("booking_date")
    if isinstance(raw, date):
        value = raw
    else:
        text = _text(form, "booking_date")
        if not text:
            raise MissingField("Booking date is required", field="booking_date")
        if not DATE_RE.match(text):
            raise InvalidDateFormat("Invalid date format. Expected YYYY-MM-DD", field="booking_date")
        try:
            value = date.fromisoformat(text)
        except ValueError:
            raise InvalidDateFormat("Invalid date format. Expected YYYY-MM-DD", field="booking_date")

    if value < today:
        raise PastDate("Booking date must be today or in the future", field="booking_date")
    return value


def _validate_email(form: Mapping[str, Any], today: date) -> str | None:
    email = _optional_text(form, "email")
    if email is None:
        return None
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        raise InvalidEmail("Please enter a valid email address", field="email")


def _resolve_times(form: Mapping[str, Any], today: date) -> tuple[str, str, str]:
    # Unknown keys are rejected even when explicit times are present
    return resolve_booking_times(_optional_text(form, "slot"), form.get("start_time"), form.get("end_time"))


def _validate_guest_count(form: Mapping[str, Any], today: date) -> int:
    raw = form.get("guest_count")
    count = None
    if isinstance(raw, int) and not isinstance(raw, bool):
        count = raw
    elif isinstance(raw, str) and raw.strip().isdigit():
        count = int(raw.strip())
    if count is None or count < 1:
        raise InvalidGuestCount("Guest count must be at least 1", field="guest_count")
    return count


def _validate_package_id(form: Mapping[str, Any], today: date) -> str | None:
    package_id = _optional_text(form, "package_id")
    if package_id and not UUID_RE.match(package_id):
        raise InvalidPackageReference("Invalid package ID format", field="package_id")
    return package_id


RULES: tuple[Callable[[Mapping[str, Any], date], Any], ...] = (
    _validate_full_name,
    _validate_mobile,
    _validate_email,
    _validate_booking_date,
    _resolve_times,
    _validate_guest_count,
    _validate_package_id,
)


def build_booking(form: Mapping[str, Any], *, today: date | None = None, status: str = "pending") -> BookingPayload:
    """Validate ``form`` and return the canonical payload.

    Raises the first :class:`BookingValidationError` in rule order.
    """
    today = today or local_today()

    full_name = _validate_full_name(form, today)
    mobile = _validate_mobile(form, today)
    email = _validate_email(form, today)
    booking_date = _validate_booking_date(form, today)
    time_slot, start_time, end_time = _resolve_times(form, today)
    guest_count = _validate_guest_count(form, today)
    package_id = _validate_package_id(form, today)

    return BookingPayload(
        full_name=full_name,
        mobile=mobile,
        email=email,
        booking_date=booking_date,
        time_slot=time_slot,
        start_time=start_time,
        end_time=end_time,
        guest_count=guest_count,
        package_id=package_id,
        event_type=_text(form, "event_type"),
        status=status,
        special_requests=_optional_text(form, "special_requests"),
        additional_notes=_optional_text(form, "additional_notes"),
    )


def collect_booking_errors(form: Mapping[str, Any], *, today: date | None = None) -> list[BookingValidationError]:
    today = today or local_today()
    errors: list[BookingValidationError] = []
    for rule in RULES:
        try:
            rule(form, today)
        except BookingValidationError as exc:
            errors.append(exc)
    return errors
