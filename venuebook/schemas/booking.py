from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]


class BookingPayload(BaseModel):
    """Canonical booking record, ready for insertion by the storage layer."""

    full_name: str
    mobile: str
    email: str | None = None
    booking_date: date
    time_slot: str | None = None
    start_time: str
    end_time: str
    guest_count: int
    package_id: str | None = None
    event_type: str = ""
    status: BookingStatus = "pending"
    special_requests: str | None = None
    additional_notes: str | None = None


class PublicBookingCreate(BaseModel):
    # Loosely typed on purpose: the payload builder owns validation and its error order
    full_name: str | None = None
    mobile: str | None = None
    email: str | None = None
    booking_date: str | None = None
    slot: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    guest_count: int | str | None = None
    package_id: str | None = None
    event_type: str | None = Field(default=None, max_length=64)
    special_requests: str | None = Field(default=None, max_length=1000)
    additional_notes: str | None = Field(default=None, max_length=1000)


class AdminBookingCreate(PublicBookingCreate):
    status: Literal["pending", "confirmed"] = "confirmed"

    garbage_bags: int = Field(default=0, ge=0)
    plates_small: int = Field(default=0, ge=0)
    plates_large: int = Field(default=0, ge=0)
    cooking_gas_qty: int = Field(default=0, ge=0)
    admin_price_adjustment: float = 0.0


class AdminBookingUpdate(BaseModel):
    booking_date: date | None = None
    time_slot: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    guest_count: int | None = Field(default=None, ge=1)
    package_id: str | None = None
    event_type: str | None = Field(default=None, max_length=64)
    special_requests: str | None = Field(default=None, max_length=1000)
    additional_notes: str | None = Field(default=None, max_length=1000)

    garbage_bags: int | None = Field(default=None, ge=0)
    plates_small: int | None = Field(default=None, ge=0)
    plates_large: int | None = Field(default=None, ge=0)
    cooking_gas_qty: int | None = Field(default=None, ge=0)
    admin_price_adjustment: float | None = None


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    notes: str = Field(default="", max_length=500)


class BookingCancel(BaseModel):
    reason: str = Field(default="", max_length=255)


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    mobile: str
    email: str | None
    booking_date: date
    time_slot: str | None
    start_time: str
    end_time: str
    guest_count: int
    status: str
    package_id: str | None
    event_type: str
    special_requests: str | None
    final_price: float


class AdminBookingOut(BookingOut):
    additional_notes: str | None
    garbage_bags: int
    plates_small: int
    plates_large: int
    cooking_gas_qty: int
    admin_price_adjustment: float
    confirmed_at: datetime | None
    cancelled_at: datetime | None
    cancel_reason: str
    created_at: datetime


class BookingActionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    booking_id: str | None
    action: str
    actor: str
    notes: str
    details_json: dict | None
    created_at: datetime
