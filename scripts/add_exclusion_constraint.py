#!/usr/bin/env python3
"""Install the booking overlap exclusion constraint on an existing PostgreSQL database."""
from sqlalchemy import text

from sharehouse.database import engine
from sharehouse.models import BOOKING_EXCLUSION_CONSTRAINT, BOOKING_OVERLAP_CONSTRAINT


def add_exclusion_constraint() -> None:
    if engine.dialect.name != "postgresql":
        print(f"Skipping: exclusion constraints need PostgreSQL, not {engine.dialect.name}.")
        return
    with engine.begin() as conn:
        present = conn.execute(
            text("SELECT 1 FROM pg_constraint WHERE conname = :name"),
            {"name": BOOKING_OVERLAP_CONSTRAINT},
        ).first()
        if present:
            print("Exclusion constraint already installed.")
            return
        conn.execute(BOOKING_EXCLUSION_CONSTRAINT)
        print("Exclusion constraint installed.")


if __name__ == "__main__":
    add_exclusion_constraint()
