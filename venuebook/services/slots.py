"""Slot vocabulary.

The one table mapping slot keys to canonical ``HH:MM`` ranges. Customer
submissions, admin bookings and the calendar all resolve slots through here.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time

from venuebook.core.errors import InvalidTimeFormat, MissingField, StartNotBeforeEnd, UnknownSlot

HHMM_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
HHMMSS_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d):[0-5]\d$")


@dataclass(frozen=True)
class SlotRange:
    start: str
    end: str


@dataclass(frozen=True)
class SlotDefinition:
    key: str
    label: str
    start: str
    end: str
    public: bool = True
    legacy: bool = False

    @property
    def range(self) -> SlotRange:
        return SlotRange(self.start, self.end)


SLOT_DEFINITIONS: dict[str, SlotDefinition] = {
    s.key: s
    for s in (
        SlotDefinition("morning", "Morning", "10:00", "14:00"),
        SlotDefinition("evening", "Evening", "14:00", "18:00"),
        SlotDefinition("night", "Night", "18:00", "22:00"),
        SlotDefinition("full_day", "Full Day", "10:00", "18:00"),
        SlotDefinition("half_day_morning", "Half Day (Morning)", "10:00", "14:00"),
        SlotDefinition("half_day_evening", "Half Day (Evening)", "14:00", "18:00"),
        # Default window; admins may pass explicit start/end
        SlotDefinition("short_duration", "Short Duration", "10:00", "18:00", public=False),
        SlotDefinition("noon", "Noon", "12:00", "17:00", public=False, legacy=True),
    )
}

SHORT_DURATION = "short_duration"
FULL_DAY = "full_day"

# Slots tracked as per-day calendar flags, in reverse-lookup priority order
CALENDAR_FLAG_SLOTS = ("morning", "evening", "night", "full_day")
SLOT_FLAG_KEYS = ("morning", "evening", "night", "short_duration", "full_day")


def _key(slot: str | None) -> str:
    return (slot or "").strip().lower()


def is_known_slot(slot: str | None) -> bool:
    return _key(slot) in SLOT_DEFINITIONS


def get_slot(slot: str) -> SlotDefinition:
    definition = SLOT_DEFINITIONS.get(_key(slot))
    if definition is None:
        raise UnknownSlot(slot)
    return definition


def resolve_slot(slot: str, start: str | None = None, end: str | None = None) -> SlotRange:
    """Resolve a slot key to its ``(start, end)`` range.

    Only ``short_duration`` honours explicit ``start``/``end``; every other
    key returns its fixed range. Raises ``UnknownSlot`` for keys outside the
    vocabulary.
    """
    definition = get_slot(slot)
    if definition.key == SHORT_DURATION:
        return SlotRange(start or definition.start, end or definition.end)
    return definition.range


def slot_for_range(start: str, end: str) -> str:
    """Reverse lookup used to derive calendar flags from stored bookings.

    Custom ranges map to ``short_duration``.
    """
    start = normalize_time_string(start)
    end = normalize_time_string(end)
    for key in CALENDAR_FLAG_SLOTS:
        definition = SLOT_DEFINITIONS[key]
        if definition.start == start and definition.end == end:
            return key
    return SHORT_DURATION


def format_12h(value: str) -> str:
    hh, mm = normalize_time_string(value).split(":")
    t = time(int(hh), int(mm))
    hour = t.hour % 12 or 12
    suffix = "AM" if t.hour < 12 else "PM"
    return f"{hour}:{t.minute:02d} {suffix}"


def format_range(start: str, end: str) -> str:
    return f"{format_12h(start)} - {format_12h(end)}"


def slot_label(slot: str, start: str | None = None, end: str | None = None) -> str:
    definition = get_slot(slot)
    r = resolve_slot(slot, start, end)
    return f"{definition.label} ({format_range(r.start, r.end)})"


def list_slots(*, include_admin_only: bool = False) -> list[SlotDefinition]:
    return [s for s in SLOT_DEFINITIONS.values() if s.public or include_admin_only]


def is_valid_hhmm(value: str | None) -> bool:
    return bool(value) and HHMM_RE.match(value) is not None


def normalize_time_string(value):
    """Return ``HH:MM`` for ``HH:MM``, ``HH:MM:SS`` or ``datetime.time`` input.

    Unrecognized strings are returned unchanged so format validation can
    report them.
    """
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value.strftime("%H:%M")
    value = str(value).strip()
    if HHMM_RE.match(value):
        return value
    if HHMMSS_RE.match(value):
        return value[:5]
    return value


def resolve_booking_times(slot: str | None, start=None, end=None) -> tuple[str, str, str]:
    """Resolve a slot key and optional explicit times to ``(slot, start, end)``.

    Explicit times win when both are given; otherwise the slot decides (with
    ``short_duration`` taking either bound on its own). The returned slot is
    the given key when it still describes the range, else the reverse lookup.
    """
    key = _key(slot) or None
    definition = get_slot(key) if key is not None else None
    start = normalize_time_string(start)
    end = normalize_time_string(end)

    if not (start and end):
        if definition is None:
            raise MissingField("Time slot selection is required", field="slot")
        r = resolve_slot(definition.key, start, end)
        start, end = r.start, r.end

    if not is_valid_hhmm(start) or not is_valid_hhmm(end):
        raise InvalidTimeFormat("Invalid time format. Expected HH:MM (24-hour format)", field="start_time")

    # Zero-padded HH:MM strings order the same way as the times they denote
    if start >= end:
        raise StartNotBeforeEnd("Start time must be earlier than end time", field="end_time")

    if definition is not None and (definition.key == SHORT_DURATION or (definition.start, definition.end) == (start, end)):
        return definition.key, start, end
    return slot_for_range(start, end), start, end
