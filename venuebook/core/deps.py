from __future__ import annotations

import secrets

from fastapi import Header, HTTPException, status

from venuebook.core.config import get_settings
from venuebook.db.session import SessionLocal


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def require_admin(x_admin_key: str | None = Header(default=None)) -> str:
    """Gate admin routes behind a shared key when one is configured.

    Identity and sessions are handled in front of this service; the returned
    value is only used as the actor name in the audit trail.
    """
    settings = get_settings()
    if not settings.admin_api_key:
        return "admin"

    if not x_admin_key or not secrets.compare_digest(x_admin_key, settings.admin_api_key):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin key")
    return "admin"
