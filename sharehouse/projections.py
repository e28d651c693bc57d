"""Pure projections of persisted bookings into display payloads."""
from datetime import timezone
from typing import Any, Dict, Optional

from .clock import to_local_display
from .config import get_settings
from .models import Booking, User
from .schemas import BookingDeleted, BookingRead


def picture_url(key: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    if not key:
        return None
    if key.startswith(("http://", "https://")):
        return key
    base = (base_url or get_settings().media_base_url).rstrip("/")
    return f"{base}/{key.lstrip('/')}"


def to_booking_view(booking: Booking, user: User, display_timezone: Optional[str] = None) -> BookingRead:
    zone = display_timezone or get_settings().display_timezone
    return BookingRead(
        id=booking.id,
        shared_space_id=booking.shared_space_id,
        user_id=booking.user_id,
        username=user.username,
        room_number=user.room_number,
        picture=picture_url(user.profile_picture),
        start_date=booking.start_date.replace(tzinfo=timezone.utc),
        end_date=booking.end_date.replace(tzinfo=timezone.utc),
        start_local=to_local_display(booking.start_date, zone),
        end_local=to_local_display(booking.end_date, zone),
    )


def to_notification_payload(booking: Booking, user: User) -> Dict[str, Any]:
    return to_booking_view(booking, user).model_dump(mode="json")


def to_deletion_payload(booking_id: int, owner: User) -> Dict[str, Any]:
    return BookingDeleted(id=booking_id, room_number=owner.room_number).model_dump(mode="json")
