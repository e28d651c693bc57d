"""Unit tests for authentication functions."""
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from jose import jwt

from sharehouse.auth import (
    authenticate_user,
    create_access_token,
    create_session_token,
    decode_token,
    get_password_hash,
    session_user_id,
    verify_password,
)
from sharehouse.config import get_settings
from sharehouse.models import User

settings = get_settings()


class TestPasswordHashing:
    def test_password_hash_and_verify(self):
        password = "MySecurePassword123!"
        hashed = get_password_hash(password)

        assert hashed != password
        assert verify_password(password, hashed) is True
        assert verify_password("WrongPassword", hashed) is False

    def test_same_password_different_hashes(self):
        hash1 = get_password_hash("TestPassword123")
        hash2 = get_password_hash("TestPassword123")

        assert hash1 != hash2


class TestTokens:
    def test_session_token_carries_a_snapshot(self):
        user = User(id=7, username="alice", room_number=101, hashed_password="x")
        token = create_session_token(user)

        decoded = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        assert decoded["sub"] == "7"
        assert decoded["username"] == "alice"
        assert "exp" in decoded

    def test_decode_token_invalid(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token("invalid.token.here")

        assert exc_info.value.status_code == 401

    def test_decode_token_expired(self):
        token = create_access_token({"sub": "1"}, timedelta(hours=-1))

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_session_user_id_reads_the_subject(self):
        user = User(id=42, username="carol", room_number=303, hashed_password="x")

        assert session_user_id(create_session_token(user)) == 42

    def test_session_user_id_rejects_non_numeric_subjects(self):
        token = create_access_token({"sub": "alice"})

        with pytest.raises(HTTPException) as exc_info:
            session_user_id(token)

        assert exc_info.value.status_code == 401


class TestUserAuthentication:
    def _user(self, password: str) -> User:
        return User(id=1, username="alice", room_number=101, hashed_password=get_password_hash(password))

    def test_authenticate_user_success(self):
        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = self._user("TestPass123")

        result = authenticate_user(mock_db, "alice", "TestPass123")

        assert result is not None
        assert result.room_number == 101

    def test_authenticate_user_wrong_password(self):
        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = self._user("CorrectPassword")

        assert authenticate_user(mock_db, "alice", "WrongPassword") is None

    def test_authenticate_user_not_found(self):
        mock_db = MagicMock()
        mock_db.query.return_value.filter.return_value.first.return_value = None

        assert authenticate_user(mock_db, "nobody", "anypassword") is None
