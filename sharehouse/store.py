"""Query layer over the bookings and shared spaces tables."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from .models import Booking, SharedSpace


class SharedSpaceCatalog:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, shared_space_id: int, for_update: bool = False) -> Optional[SharedSpace]:
        """Resolve a space. ``for_update`` row-locks it until the transaction ends."""

        query = select(SharedSpace).where(SharedSpace.id == shared_space_id)
        if for_update:
            query = query.with_for_update()
        return self.db.execute(query).scalar_one_or_none()

    def list_all(self) -> List[SharedSpace]:
        return list(self.db.execute(select(SharedSpace).order_by(SharedSpace.id)).scalars())


class BookingStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, booking_id: int) -> Optional[Booking]:
        query = select(Booking).options(joinedload(Booking.user)).where(Booking.id == booking_id)
        return self.db.execute(query).scalar_one_or_none()

    def find_overlapping(
        self,
        shared_space_id: int,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> Optional[Booking]:
        query = select(Booking).where(
            Booking.shared_space_id == shared_space_id,
            Booking.start_date < end,
            Booking.end_date > start,
        )
        if exclude_id is not None:
            query = query.where(Booking.id != exclude_id)
        return self.db.execute(query.limit(1)).scalar_one_or_none()

    def count_active(
        self,
        shared_space_id: int,
        user_id: int,
        now: datetime,
        exclude_id: Optional[int] = None,
    ) -> int:
        """Count the user's bookings on a space that have not ended yet."""

        query = select(func.count(Booking.id)).where(
            Booking.shared_space_id == shared_space_id,
            Booking.user_id == user_id,
            Booking.end_date >= now,
        )
        if exclude_id is not None:
            query = query.where(Booking.id != exclude_id)
        return self.db.execute(query).scalar_one()

    def find_in_range(self, shared_space_id: int, start: datetime, end: datetime) -> List[Booking]:
        query = (
            select(Booking)
            .options(joinedload(Booking.user))
            .where(
                Booking.shared_space_id == shared_space_id,
                Booking.start_date < end,
                Booking.end_date > start,
            )
            .order_by(Booking.start_date)
        )
        return list(self.db.execute(query).scalars())

    def find_for_user(self, user_id: int, now: datetime) -> List[Booking]:
        query = (
            select(Booking)
            .options(joinedload(Booking.user))
            .where(Booking.user_id == user_id, Booking.end_date >= now)
            .order_by(Booking.start_date)
        )
        return list(self.db.execute(query).scalars())

    def create(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.flush()
        return booking

    def update(self, booking: Booking, **fields: object) -> None:
        for key, value in fields.items():
            setattr(booking, key, value)
        self.db.flush()

    def delete(self, booking: Booking) -> None:
        self.db.delete(booking)
        self.db.flush()
