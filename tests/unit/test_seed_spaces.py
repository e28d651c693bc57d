"""Unit tests for the default shared space seeding script."""
from scripts.seed_spaces import DEFAULT_SPACES, seed_spaces
from sharehouse.models import SharedSpace


def test_seed_is_idempotent(db_session):
    assert seed_spaces(db_session) == len(DEFAULT_SPACES)
    assert seed_spaces(db_session) == 0

    gym = db_session.query(SharedSpace).filter(SharedSpace.name_code == "gym").one()
    assert (gym.start_day_time, gym.end_day_time, gym.max_booking_hours, gym.max_booking_by_user) == (
        "8:00",
        "23:00",
        1,
        2,
    )
