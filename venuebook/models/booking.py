from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from venuebook.db.base import Base
from venuebook.models._mixins import TimestampMixin


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[str] = mapped_column(String(32), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    guest_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    booking_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    time_slot: Mapped[str | None] = mapped_column(String(32), nullable=True)  # morning/evening/.../short_duration
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", index=True)  # pending/confirmed/cancelled/completed

    package_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("packages.id"), nullable=True)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    additional_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Extras and pricing
    garbage_bags: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    plates_small: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    plates_large: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cooking_gas_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    admin_price_adjustment: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    final_price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancel_reason: Mapped[str] = mapped_column(String(255), nullable=False, default="")
