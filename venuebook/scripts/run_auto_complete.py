from __future__ import annotations

from venuebook.core.logging_config import setup_logging
from venuebook.db.session import SessionLocal
from venuebook.services.booking_payload import local_today
from venuebook.services.booking_service import complete_past_bookings


def main() -> int:
    setup_logging()
    db = SessionLocal()
    try:
        count = complete_past_bookings(db, today=local_today())
        print(f"completed: {count}" if count else "no_targets")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
