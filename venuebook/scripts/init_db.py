from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.exc import ProgrammingError

from venuebook.db.base import Base
from venuebook.db.session import engine

# Import models to register with SQLAlchemy
import venuebook.models  # noqa: F401


def _minutes(col: str) -> str:
    return f"(split_part({col}, ':', 1)::int * 60 + split_part({col}, ':', 2)::int)"


NO_OVERLAP_SQL = f"""
ALTER TABLE bookings
ADD CONSTRAINT bookings_no_overlap
EXCLUDE USING gist (
    booking_date WITH =,
    int4range({_minutes('start_time')}, {_minutes('end_time')}, '[)') WITH &&
)
WHERE (status IN ('pending', 'confirmed'));
"""


def main() -> int:
    postgres = engine.dialect.name == "postgresql"

    if postgres:
        # Extensions needed for exclusion constraints (overlap prevention)
        with engine.begin() as conn:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS btree_gist"))

    Base.metadata.create_all(bind=engine)

    # Overlapping active bookings on one date are rejected by the database too
    if postgres:
        try:
            with engine.begin() as conn:
                conn.execute(text(NO_OVERLAP_SQL))
        except ProgrammingError:
            print("bookings_no_overlap already present")

    print("DB initialized")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
