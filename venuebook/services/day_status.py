"""Per-day availability classification.

``classify_day`` computes one :class:`DayClassification` from the day's
bookings and events. The customer calendar (tri-state) and the admin calendar
(four-state) are projections of it through ordered rule tables, first match
wins, so the two views cannot drift apart.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from venuebook.services.conflict import DEFAULT_CAPACITY, active_bookings_on, is_date_blocked
from venuebook.services.slots import (
    FULL_DAY,
    SHORT_DURATION,
    SLOT_DEFINITIONS,
    SLOT_FLAG_KEYS,
    is_known_slot,
    normalize_time_string,
    slot_for_range,
    slot_label,
)


class PublicStatus(str, Enum):
    AVAILABLE = "available"
    PARTIAL = "partial"
    FULL = "full"


class AdminStatus(str, Enum):
    AVAILABLE = "available"
    PARTIAL = "partial"
    BOOKED = "booked"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class BookedRange:
    start_time: str
    end_time: str
    status: str
    slot: str
    label: str
    guest_count: int = 0


@dataclass(frozen=True)
class DayClassification:
    day: date
    blocked: bool
    booking_count: int
    confirmed_count: int
    pending_count: int
    total_guests: int
    capacity: int
    full_day_booked: bool
    slot_flags: Mapping[str, bool] = field(default_factory=dict)
    ranges: tuple[BookedRange, ...] = ()

    @property
    def capacity_reached(self) -> bool:
        return self.booking_count >= self.capacity

    @property
    def has_full_day_flag(self) -> bool:
        return bool(self.slot_flags.get(FULL_DAY))

    @property
    def has_partial_flag(self) -> bool:
        return not self.has_full_day_flag and any(self.slot_flags.get(k) for k in SLOT_FLAG_KEYS if k != FULL_DAY)

    @property
    def public_status(self) -> PublicStatus:
        return _first_match(PUBLIC_RULES, self, PublicStatus.AVAILABLE)

    @property
    def admin_status(self) -> AdminStatus:
        return _first_match(ADMIN_RULES, self, AdminStatus.AVAILABLE)

    @property
    def labels(self) -> list[str]:
        return [r.label for r in self.ranges]


Rule = tuple[Any, Callable[[DayClassification], bool]]

PUBLIC_RULES: tuple[Rule, ...] = (
    (PublicStatus.FULL, lambda c: c.blocked),
    (PublicStatus.FULL, lambda c: c.full_day_booked or c.has_full_day_flag or c.capacity_reached),
    (PublicStatus.PARTIAL, lambda c: c.booking_count > 0 or c.has_partial_flag),
)

# Supplied flags only decide the admin status when no bookings are known for the day
ADMIN_RULES: tuple[Rule, ...] = (
    (AdminStatus.BLOCKED, lambda c: c.blocked),
    (AdminStatus.BOOKED, lambda c: c.confirmed_count > 0 or (c.booking_count == 0 and c.has_full_day_flag)),
    (AdminStatus.PARTIAL, lambda c: c.pending_count > 0 or c.has_partial_flag),
)


def _first_match(rules: Iterable[Rule], c: DayClassification, default):
    for status, predicate in rules:
        if predicate(c):
            return status
    return default


def _covers_full_day(start: str, end: str) -> bool:
    full = SLOT_DEFINITIONS[FULL_DAY]
    return start <= full.start and end >= full.end


def _booking_slot(booking: Any, start: str, end: str) -> str:
    slot = (getattr(booking, "time_slot", None) or "").lower()
    if is_known_slot(slot):
        return slot
    return slot_for_range(start, end)


def _booked_range(booking: Any) -> BookedRange:
    start = normalize_time_string(booking.start_time)
    end = normalize_time_string(booking.end_time)
    slot = _booking_slot(booking, start, end)
    if slot == SHORT_DURATION:
        label = slot_label(slot, start, end)
    else:
        label = slot_label(slot)
    return BookedRange(
        start_time=start,
        end_time=end,
        status=booking.status,
        slot=slot,
        label=label,
        guest_count=getattr(booking, "guest_count", 0) or 0,
    )


def derive_slot_flags(ranges: Iterable[BookedRange]) -> dict[str, bool]:
    flags = {k: False for k in SLOT_FLAG_KEYS}
    for r in ranges:
        flags[slot_for_range(r.start_time, r.end_time)] = True
        if _covers_full_day(r.start_time, r.end_time):
            flags[FULL_DAY] = True
    return flags


def classify_day(
    day: date,
    bookings: Iterable[Any],
    events: Iterable[Any] = (),
    *,
    capacity: int = DEFAULT_CAPACITY,
    slot_flags: Mapping[str, bool] | None = None,
) -> DayClassification:
    """Classify one calendar day.

    ``bookings`` and ``events`` may cover other dates too; only rows dated
    ``day`` are used. ``slot_flags`` replaces the flags derived from bookings
    when the caller already has them precomputed.
    """
    active = active_bookings_on(day, bookings)
    ranges = tuple(sorted((_booked_range(b) for b in active), key=lambda r: (r.start_time, r.end_time)))

    if slot_flags is None:
        flags = derive_slot_flags(ranges)
    else:
        flags = {k: bool(slot_flags.get(k)) for k in SLOT_FLAG_KEYS}

    return DayClassification(
        day=day,
        blocked=is_date_blocked(day, events),
        booking_count=len(active),
        confirmed_count=sum(1 for b in active if b.status == "confirmed"),
        pending_count=sum(1 for b in active if b.status == "pending"),
        total_guests=sum(r.guest_count for r in ranges),
        capacity=capacity,
        full_day_booked=any(_covers_full_day(r.start_time, r.end_time) for r in ranges),
        slot_flags=flags,
        ranges=ranges,
    )
