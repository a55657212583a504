from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from venuebook.schemas.booking import BookingOut


class SlotOut(BaseModel):
    key: str
    label: str
    start_time: str
    end_time: str
    display: str


class TimeRangeOut(BaseModel):
    start: str
    end: str
    guests: int


class AvailabilityDay(BaseModel):
    date: date
    bookings: int
    total_guests: int
    status: str  # available/partial/full
    blocked: bool
    time_slots: list[TimeRangeOut]


class AvailabilityResponse(BaseModel):
    days: dict[str, AvailabilityDay]


class AvailabilityCheckResponse(BaseModel):
    date: date
    available: bool
    has_conflict: bool
    blocked: bool
    existing_bookings: int
    message: str


class PublicCalendarDay(BaseModel):
    date: date
    in_month: bool
    status: str  # available/partial/full


class AdminCalendarDay(BaseModel):
    date: date
    in_month: bool
    status: str  # available/partial/booked/blocked
    public_status: str
    bookings: int
    confirmed: int
    pending: int
    total_guests: int
    slots: dict[str, bool]
    labels: list[str]


class PublicCalendarResponse(BaseModel):
    year: int
    month: int
    days: list[PublicCalendarDay]


class AdminCalendarResponse(BaseModel):
    year: int
    month: int
    days: list[AdminCalendarDay]


class DayBookingsResponse(BaseModel):
    date: date
    status: str
    bookings: list[BookingOut]
