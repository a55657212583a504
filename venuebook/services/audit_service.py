from __future__ import annotations

from typing import Any, Mapping

from fastapi import Request
from sqlalchemy.orm import Session

from venuebook.models.booking_action import BookingAction

SENSITIVE_KEYS = {
    "mobile",
    "email",
    "full_name",
    "phone",
}


def _sanitize(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        clean: dict[str, Any] = {}
        for k, v in obj.items():
            if k in SENSITIVE_KEYS:
                clean[k] = "<redacted>"
            else:
                clean[k] = _sanitize(v)
        return clean
    if isinstance(obj, (list, tuple)):
        return [_sanitize(v) for v in obj]
    if isinstance(obj, (str, int, float, bool)):
        return obj
    # dates, enums
    return str(obj)


def client_ip(request: Request | None) -> str:
    if request is None:
        return ""
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


def write_booking_action(
    db: Session,
    *,
    action: str,
    booking_id: str | None = None,
    actor: str = "system",
    notes: str = "",
    details: Mapping[str, Any] | None = None,
    request: Request | None = None,
    commit: bool = True,
) -> BookingAction:
    row = BookingAction(
        booking_id=booking_id,
        action=action,
        actor=actor,
        notes=notes[:500],
        details_json=_sanitize(dict(details)) if details is not None else None,
        ip_address=client_ip(request),
    )
    db.add(row)
    if commit:
        db.commit()
    return row
