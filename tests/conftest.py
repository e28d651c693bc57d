import os
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("NOTIFICATIONS_BACKEND", "memory")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "./.test-logs")

from sharehouse.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from sharehouse.auth import get_password_hash  # noqa: E402
from sharehouse.database import Base, SessionLocal, engine  # noqa: E402
from sharehouse.models import SharedSpace, User  # noqa: E402
from sharehouse.notifications import get_notification_sink  # noqa: E402
from services.bookings.app import app as bookings_app  # noqa: E402
from services.spaces.app import app as spaces_app  # noqa: E402
from services.spaces.app import space_listing_cache  # noqa: E402
from services.users.app import app as users_app  # noqa: E402


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    get_notification_sink().clear()
    space_listing_cache.invalidate()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def sink():
    return get_notification_sink()


@pytest.fixture()
def make_user(db_session) -> Callable[..., User]:
    def factory(username: str, room_number: int, password: str = "Passw0rd!", **fields) -> User:
        user = User(
            username=username,
            room_number=room_number,
            hashed_password=get_password_hash(password),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return factory


@pytest.fixture()
def make_space(db_session) -> Callable[..., SharedSpace]:
    def factory(name_code: str = "gym", **overrides) -> SharedSpace:
        fields = {
            "name_code": name_code,
            "name_en": name_code.title(),
            "name_jp": name_code,
            "start_day_time": "08:00",
            "end_day_time": "23:00",
            "max_booking_hours": 1,
            "max_booking_by_user": 2,
        }
        fields.update(overrides)
        space = SharedSpace(**fields)
        db_session.add(space)
        db_session.commit()
        db_session.refresh(space)
        return space

    return factory


@pytest.fixture()
def users_client() -> Generator[TestClient, None, None]:
    with TestClient(users_app) as client:
        yield client


@pytest.fixture()
def spaces_client() -> Generator[TestClient, None, None]:
    with TestClient(spaces_app) as client:
        yield client


@pytest.fixture()
def bookings_client() -> Generator[TestClient, None, None]:
    with TestClient(bookings_app) as client:
        yield client
