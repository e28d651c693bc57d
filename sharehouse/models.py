"""SQLAlchemy models shared across all services."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    DDL,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from .clock import parse_day_time, utcnow
from .database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, default=None)
    room_number: Mapped[int] = mapped_column(Integer, unique=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    profile_picture: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    bookings: Mapped[List["Booking"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class SharedSpace(Base):
    __tablename__ = "shared_spaces"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name_code: Mapped[str] = mapped_column(String(50), unique=True)
    name_en: Mapped[str] = mapped_column(String(100))
    name_jp: Mapped[str] = mapped_column(String(100))
    description_en: Mapped[Optional[str]] = mapped_column(String(1000), default=None)
    description_jp: Mapped[Optional[str]] = mapped_column(String(1000), default=None)
    picture: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    # wall-clock "H:MM" bounds, evaluated in UTC
    start_day_time: Mapped[str] = mapped_column(String(5))
    end_day_time: Mapped[str] = mapped_column(String(5))
    max_booking_hours: Mapped[int] = mapped_column(Integer)
    max_booking_by_user: Mapped[int] = mapped_column(Integer)

    bookings: Mapped[List["Booking"]] = relationship(back_populates="shared_space", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("max_booking_hours > 0", name="ck_shared_spaces_max_booking_hours"),
        CheckConstraint("max_booking_by_user > 0", name="ck_shared_spaces_max_booking_by_user"),
    )

    @validates("start_day_time", "end_day_time")
    def _validate_day_time(self, key: str, value: str) -> str:
        bound = parse_day_time(value)
        other = self.end_day_time if key == "start_day_time" else self.start_day_time
        if other is not None:
            opening, closing = (bound, parse_day_time(other))
            if key == "end_day_time":
                opening, closing = closing, opening
            if opening >= closing:
                raise ValueError(f"start_day_time must be earlier than end_day_time, got {value!r}")
        return value


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    shared_space_id: Mapped[int] = mapped_column(ForeignKey("shared_spaces.id", ondelete="CASCADE"), index=True)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    user: Mapped[User] = relationship(back_populates="bookings")
    shared_space: Mapped[SharedSpace] = relationship(back_populates="bookings")

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_bookings_interval"),
        Index("ix_bookings_space_interval", "shared_space_id", "start_date", "end_date"),
    )


BOOKING_OVERLAP_CONSTRAINT = "ex_bookings_space_overlap"

# Half-open [start, end) ranges: touching bookings do not collide.
BOOKING_EXCLUSION_CONSTRAINT = DDL(
    "CREATE EXTENSION IF NOT EXISTS btree_gist; "
    f"ALTER TABLE bookings ADD CONSTRAINT {BOOKING_OVERLAP_CONSTRAINT} "
    "EXCLUDE USING gist (shared_space_id WITH =, tsrange(start_date, end_date, '[)') WITH &&)"
)

event.listen(
    Booking.__table__,
    "after_create",
    BOOKING_EXCLUSION_CONSTRAINT.execute_if(dialect="postgresql"),
)
