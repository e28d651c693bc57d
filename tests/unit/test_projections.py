"""Unit tests for time helpers and booking payload projections."""
from datetime import datetime, time, timedelta, timezone

import pytest

from sharehouse.clock import parse_day_time, to_local_display, to_utc_naive
from sharehouse.models import Booking, User
from sharehouse.projections import (
    picture_url,
    to_booking_view,
    to_deletion_payload,
    to_notification_payload,
)


def _booking() -> Booking:
    return Booking(
        id=5,
        user_id=1,
        shared_space_id=2,
        start_date=datetime(2030, 1, 2, 14, 30),
        end_date=datetime(2030, 1, 2, 15, 30),
    )


def _user(**fields) -> User:
    return User(id=1, username="alice", room_number=101, hashed_password="x", **fields)


class TestClock:
    def test_parse_day_time_accepts_short_hours(self):
        assert parse_day_time("8:00") == time(8, 0)
        assert parse_day_time("23:30") == time(23, 30)

    @pytest.mark.parametrize("value", ["24:00", "8h", "8:60", ""])
    def test_parse_day_time_rejects_malformed_values(self, value):
        with pytest.raises(ValueError):
            parse_day_time(value)

    def test_aware_datetimes_become_naive_utc(self):
        tokyo = timezone(timedelta(hours=9))
        assert to_utc_naive(datetime(2030, 1, 2, 9, 0, tzinfo=tokyo)) == datetime(2030, 1, 2, 0, 0)

    def test_naive_datetimes_are_kept(self):
        assert to_utc_naive(datetime(2030, 1, 2, 9, 0)) == datetime(2030, 1, 2, 9, 0)

    def test_local_display_crosses_the_date_line(self):
        assert to_local_display(datetime(2030, 1, 2, 20, 0), "Asia/Tokyo") == "2030-01-03 05:00:00"

    def test_unknown_zone_has_no_display(self):
        assert to_local_display(datetime(2030, 1, 2, 20, 0), "Nowhere/Special") is None


class TestProjections:
    def test_picture_url(self):
        assert picture_url(None) is None
        assert picture_url("a/b.png", base_url="http://media/bucket/") == "http://media/bucket/a/b.png"
        assert picture_url("https://cdn/x.png") == "https://cdn/x.png"

    def test_booking_view_is_denormalized(self):
        view = to_booking_view(_booking(), _user(profile_picture="avatars/a.png"), display_timezone="Asia/Tokyo")

        assert view.username == "alice"
        assert view.room_number == 101
        assert view.picture.endswith("/avatars/a.png")
        assert view.start_date.tzinfo is not None
        assert view.start_local == "2030-01-02 23:30:00"
        assert view.end_local == "2030-01-03 00:30:00"

    def test_notification_payload_is_json_ready(self):
        payload = to_notification_payload(_booking(), _user())

        assert payload["id"] == 5
        assert payload["picture"] is None
        assert payload["start_date"] == "2030-01-02T14:30:00Z"

    def test_deletion_payload(self):
        assert to_deletion_payload(5, _user()) == {"id": 5, "room_number": 101}
