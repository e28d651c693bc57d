"""Booking conflict and eligibility engine.

``BookingScheduler`` decides whether a reservation of a shared space may be
accepted. Checks run in a fixed order and the first failure wins:

1. required fields are present
2. on update, the booking exists and belongs to the acting user
3. the shared space exists
4. the booking does not start in the past
5. ``0 < duration <= max_booking_hours``
6. the interval sits inside the space's daily window, taken on the UTC
   calendar day of the start
7. no other booking of the space overlaps ``[start, end)``
8. the user holds fewer than ``max_booking_by_user`` active bookings there

Checks 3 to 8 and the commit run while holding the space's writer lock and,
on databases that support it, a row lock on the space.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .clock import parse_day_time, to_utc_naive, utcnow
from .errors import ErrorKind, SchedulerError
from .locks import SpaceLockRegistry, space_locks
from .models import BOOKING_OVERLAP_CONSTRAINT, Booking, SharedSpace, User
from .notifications import DELETED_BOOKING, NEW_BOOKING, UPDATED_BOOKING, NotificationSink
from .projections import to_booking_view, to_deletion_payload, to_notification_payload
from .schemas import BookingCount, BookingProposal, BookingRead
from .store import BookingStore, SharedSpaceCatalog

logger = logging.getLogger(__name__)


def working_window(day: date, start_day_time: str, end_day_time: str) -> Tuple[datetime, datetime]:
    """Concrete UTC instants bounding a space's opening hours on ``day``."""

    return (
        datetime.combine(day, parse_day_time(start_day_time)),
        datetime.combine(day, parse_day_time(end_day_time)),
    )


def duration_hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


# SQLSTATE exclusion_violation
EXCLUSION_VIOLATION = "23P01"


def violates_overlap_guard(exc: IntegrityError) -> bool:
    """Whether ``exc`` comes from the bookings overlap exclusion constraint."""

    if getattr(exc.orig, "pgcode", None) == EXCLUSION_VIOLATION:
        return True
    return BOOKING_OVERLAP_CONSTRAINT in str(exc.orig)


class BookingScheduler:
    def __init__(
        self,
        db: Session,
        sink: NotificationSink,
        clock: Callable[[], datetime] = utcnow,
        locks: SpaceLockRegistry = space_locks,
        range_padding_days: int = 1,
    ) -> None:
        self.db = db
        self.store = BookingStore(db)
        self.catalog = SharedSpaceCatalog(db)
        self.sink = sink
        self.clock = clock
        self.locks = locks
        self.range_padding_days = range_padding_days

    @contextmanager
    def _storage(self) -> Iterator[None]:
        """Map persistence failures to ``STORAGE_ERROR`` and never leave partial writes."""

        try:
            yield
        except SchedulerError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            if isinstance(exc, IntegrityError) and violates_overlap_guard(exc):
                logger.warning("Booking rejected by the database: %s", exc.orig)
                raise SchedulerError(ErrorKind.CONFLICT, "Time slot already booked!") from exc
            logger.exception("Booking storage failure")
            raise SchedulerError(ErrorKind.STORAGE_ERROR, "Error processing booking") from exc

    def _notify(self, event_name: str, payload: Dict[str, Any]) -> None:
        try:
            self.sink.emit(event_name, payload)
        except Exception:  # noqa: BLE001
            logger.warning("Could not emit %s notification", event_name, exc_info=True)

    def propose_booking(self, request: BookingProposal, user: User, is_update: bool = False) -> BookingRead:
        """Validate a create or update intent and commit it when every rule passes."""

        target_id = request.booking_id if is_update else request.shared_space_id
        if target_id is None or request.start_date is None or request.end_date is None:
            raise SchedulerError(ErrorKind.DATA_MISSING, "Missing data!")

        start = to_utc_naive(request.start_date)
        end = to_utc_naive(request.end_date)
        now = self.clock()

        with self._storage():
            booking: Optional[Booking] = None
            if is_update:
                booking = self.store.find_by_id(request.booking_id)
                if booking is None or booking.user_id != user.id:
                    raise SchedulerError(ErrorKind.UNAUTHORIZED, "Unauthorized or booking not found!")
                shared_space_id = booking.shared_space_id
            else:
                shared_space_id = request.shared_space_id

            with self.locks.for_space(shared_space_id):
                space = self.catalog.find_by_id(shared_space_id, for_update=True)
                if space is None:
                    raise SchedulerError(ErrorKind.NOT_FOUND, "Shared space not found!")

                self._check_rules(space, user, start, end, now, booking)

                if booking is not None:
                    self.store.update(booking, start_date=start, end_date=end)
                    event_name = UPDATED_BOOKING
                else:
                    booking = self.store.create(
                        Booking(user_id=user.id, shared_space_id=space.id, start_date=start, end_date=end)
                    )
                    event_name = NEW_BOOKING
                self.db.commit()
            self.db.refresh(booking)

        logger.info(
            "Booking %s %s: user=%s space=%s %s -> %s",
            booking.id,
            "updated" if is_update else "created",
            user.id,
            booking.shared_space_id,
            start.isoformat(),
            end.isoformat(),
        )
        self._notify(event_name, to_notification_payload(booking, user))
        return to_booking_view(booking, user)

    def _check_rules(
        self,
        space: SharedSpace,
        user: User,
        start: datetime,
        end: datetime,
        now: datetime,
        booking: Optional[Booking],
    ) -> None:
        if start < now or (booking is not None and booking.end_date < now):
            raise self._reject(ErrorKind.CANNOT_BOOK_PAST, "You can't book in the past!", space, user)

        hours = duration_hours(start, end)
        if hours <= 0 or hours > space.max_booking_hours:
            raise self._reject(
                ErrorKind.DURATION_INVALID,
                f"The booking duration must be greater than 0 and at most {space.max_booking_hours} hours!",
                space,
                user,
            )

        # Both bounds come from the start's UTC day, so a booking crossing midnight is rejected.
        try:
            day_start, day_end = working_window(start.date(), space.start_day_time, space.end_day_time)
        except ValueError as exc:
            logger.error(
                "Shared space %s has unusable working hours %r-%r",
                space.id,
                space.start_day_time,
                space.end_day_time,
            )
            raise SchedulerError(ErrorKind.STORAGE_ERROR, "Error processing booking") from exc
        if start < day_start or end > day_end:
            raise self._reject(
                ErrorKind.OUTSIDE_WORKING_HOURS,
                "Please book within the shared space's working hours!",
                space,
                user,
            )

        exclude_id = booking.id if booking is not None else None
        if self.store.find_overlapping(space.id, start, end, exclude_id) is not None:
            raise self._reject(ErrorKind.CONFLICT, "Time slot already booked!", space, user)

        if self.store.count_active(space.id, user.id, now, exclude_id) >= space.max_booking_by_user:
            raise self._reject(ErrorKind.QUOTA_EXCEEDED, "User booking limit reached!", space, user)

    @staticmethod
    def _reject(kind: ErrorKind, message: str, space: SharedSpace, user: User) -> SchedulerError:
        logger.info("Booking rejected (%s): user=%s space=%s", kind.value, user.id, space.id)
        return SchedulerError(kind, message)

    def delete_booking(self, booking_id: int, user: User) -> None:
        with self._storage():
            booking = self.store.find_by_id(booking_id)
            if booking is None:
                raise SchedulerError(ErrorKind.NOT_FOUND, "Booking not found!")
            if booking.user_id != user.id:
                raise SchedulerError(ErrorKind.UNAUTHORIZED, "You are not allowed to delete this booking!")

            payload = to_deletion_payload(booking.id, booking.user)
            with self.locks.for_space(booking.shared_space_id):
                self.store.delete(booking)
                self.db.commit()

        logger.info("Booking %s deleted by user %s", booking_id, user.id)
        self._notify(DELETED_BOOKING, payload)

    def list_bookings_in_range(
        self,
        shared_space_id: Optional[int],
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> List[BookingRead]:
        """Bookings of a space intersecting ``[start_date, end_date]`` widened by the padding."""

        if shared_space_id is None or start_date is None or end_date is None:
            raise SchedulerError(ErrorKind.DATA_MISSING, "Both start_date and end_date are required!")
        if start_date > end_date:
            raise SchedulerError(ErrorKind.DATA_INVALID, "start_date must not be after end_date!")

        padding = relativedelta(days=self.range_padding_days)
        window_start = datetime.combine(start_date, time.min) - padding
        window_end = datetime.combine(end_date, time.min) + timedelta(days=1) + padding

        with self._storage():
            if self.catalog.find_by_id(shared_space_id) is None:
                raise SchedulerError(ErrorKind.NOT_FOUND, "Shared space not found!")
            bookings = self.store.find_in_range(shared_space_id, window_start, window_end)
        return [to_booking_view(booking, booking.user) for booking in bookings]

    def count_active_bookings_for_user(self, shared_space_id: int, user_id: int) -> BookingCount:
        with self._storage():
            space = self.catalog.find_by_id(shared_space_id)
            if space is None:
                raise SchedulerError(ErrorKind.NOT_FOUND, "Shared space not found!")
            count = self.store.count_active(shared_space_id, user_id, self.clock())
        return BookingCount(
            shared_space_id=shared_space_id,
            count=count,
            max_booking_by_user=space.max_booking_by_user,
            remaining=max(space.max_booking_by_user - count, 0),
        )

    def list_user_bookings(self, user: User) -> List[BookingRead]:
        with self._storage():
            bookings = self.store.find_for_user(user.id, self.clock())
        return [to_booking_view(booking, user) for booking in bookings]
