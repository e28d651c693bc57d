from tests.helpers import PASSWORD, auth_header, register


def test_register_login_and_read_me(users_client):
    created = register(users_client, "alice", 101, email="alice@example.com")
    assert created["room_number"] == 101
    assert "hashed_password" not in created

    headers = auth_header(users_client, "alice")
    me = users_client.get("/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["username"] == "alice"


def test_room_number_is_unique(users_client):
    register(users_client, "alice", 101)
    response = users_client.post(
        "/users/register",
        json={"username": "bob", "room_number": 101, "password": PASSWORD},
    )
    assert response.status_code == 400


def test_wrong_password_is_rejected(users_client):
    register(users_client, "alice", 101)
    response = users_client.post(
        "/users/login",
        data={"username": "alice", "password": "nope-nope"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 401


def test_profile_update_refreshes_the_session(users_client):
    register(users_client, "alice", 101)
    headers = auth_header(users_client, "alice")

    response = users_client.put(
        "/users/me",
        json={"username": "alice-b", "profile_picture": "avatars/alice.png"},
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["username"] == "alice-b"

    # the old token keeps working: the user is re-read from the store on every request
    assert users_client.get("/users/me", headers=headers).json()["username"] == "alice-b"

    fresh = {"Authorization": f"Bearer {body['token']['access_token']}"}
    assert users_client.get("/users/me", headers=fresh).json()["profile_picture"] == "avatars/alice.png"


def test_inactive_user_is_refused(users_client, db_session):
    from sharehouse.models import User

    register(users_client, "alice", 101)
    headers = auth_header(users_client, "alice")
    user = db_session.query(User).filter(User.username == "alice").one()
    user.is_active = False
    db_session.commit()

    assert users_client.get("/users/me", headers=headers).status_code == 403


def test_me_requires_a_token(users_client):
    assert users_client.get("/users/me").status_code == 401
