from datetime import date, datetime, timedelta

from sharehouse.clock import utcnow

PASSWORD = "Passw0rd!"


def register(users_client, username: str, room_number: int, **fields) -> dict:
    response = users_client.post(
        "/users/register",
        json={"username": username, "room_number": room_number, "password": PASSWORD, **fields},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_header(users_client, username: str, password: str = PASSWORD) -> dict[str, str]:
    response = users_client.post(
        "/users/login",
        data={"username": username, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def booking_day(days_ahead: int = 2) -> date:
    return (utcnow() + timedelta(days=days_ahead)).date()


def slot(day: date, hour: int, minute: int = 0) -> str:
    return datetime(day.year, day.month, day.day, hour, minute).isoformat() + "Z"
