# tests/test_auth.py

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from todo_api.auth import (
    AuthService,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from todo_api.config import Settings
from todo_api.database import Database
from todo_api.errors import DuplicateUser, InvalidCredentials, InvalidToken
from todo_api.store import CredentialStore

from .helpers import TEST_SECRET


def test_password_hash_is_salted_and_verifies() -> None:
    h1 = get_password_hash("pw1", rounds=4)
    h2 = get_password_hash("pw1", rounds=4)

    assert h1 != h2
    assert "pw1" not in h1
    assert verify_password("pw1", h1)
    assert verify_password("pw1", h2)
    assert not verify_password("pw2", h1)


def test_verify_password_rejects_malformed_hash() -> None:
    assert verify_password("pw1", "not-a-bcrypt-hash") is False


def test_token_round_trip_and_claims() -> None:
    token = create_access_token(42, TEST_SECRET)
    assert decode_access_token(token, TEST_SECRET) == 42

    payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])
    assert payload["sub"] == "42"
    assert payload["exp"] - payload["iat"] == 3600


def test_expired_token_is_rejected() -> None:
    token = create_access_token(1, TEST_SECRET, expires_delta=timedelta(seconds=-1))
    with pytest.raises(InvalidToken):
        decode_access_token(token, TEST_SECRET)


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = create_access_token(1, "another-secret-0123456789abcdef0123456789")
    with pytest.raises(InvalidToken):
        decode_access_token(token, TEST_SECRET)


@pytest.mark.parametrize(
    "payload",
    [
        {"sub": "not-a-number", "exp": 9999999999},
        {"exp": 9999999999},
        {"sub": "1"},
    ],
)
def test_token_with_bad_claims_is_rejected(payload: dict) -> None:
    token = jwt.encode(payload, TEST_SECRET, algorithm="HS256")
    with pytest.raises(InvalidToken):
        decode_access_token(token, TEST_SECRET)


def test_garbage_token_is_rejected() -> None:
    with pytest.raises(InvalidToken):
        decode_access_token("garbage", TEST_SECRET)


def test_register_login_verify_same_user(database: Database, settings: Settings) -> None:
    with database.session() as db:
        auth = AuthService(CredentialStore(db), settings)
        t1 = auth.register("alice", "a@x.com", "pw1")
        user_id = auth.verify_token(t1)

        user = CredentialStore(db).get_by_username("alice")
        assert user is not None
        assert user.id == user_id
        assert user.password_hash != "pw1"

        t2 = auth.login("alice", "pw1")
        assert auth.verify_token(t2) == user_id


def test_register_duplicate_username_creates_no_second_user(database: Database, settings: Settings) -> None:
    with database.session() as db:
        users = CredentialStore(db)
        auth = AuthService(users, settings)
        auth.register("alice", "a@x.com", "pw1")

        with pytest.raises(DuplicateUser) as exc:
            auth.register("alice", "other@x.com", "pw2")
        assert exc.value.message == "User already exists"
        assert users.count() == 1


def test_register_duplicate_email(database: Database, settings: Settings) -> None:
    with database.session() as db:
        users = CredentialStore(db)
        auth = AuthService(users, settings)
        auth.register("alice", "a@x.com", "pw1")

        with pytest.raises(DuplicateUser) as exc:
            auth.register("alice2", "a@x.com", "pw1")
        assert exc.value.message == "Email already registered"
        assert users.count() == 1


def test_store_maps_integrity_error_to_duplicate(database: Database) -> None:
    with database.session() as db:
        users = CredentialStore(db)
        users.add("alice", "a@x.com", get_password_hash("pw1", rounds=4))

        with pytest.raises(DuplicateUser):
            users.add("alice", "b@x.com", get_password_hash("pw1", rounds=4))
        assert users.count() == 1


def test_login_failures_are_indistinguishable(database: Database, settings: Settings) -> None:
    with database.session() as db:
        auth = AuthService(CredentialStore(db), settings)
        auth.register("alice", "a@x.com", "pw1")

        with pytest.raises(InvalidCredentials) as wrong_pw:
            auth.login("alice", "nope")
        with pytest.raises(InvalidCredentials) as unknown:
            auth.login("mallory", "pw1")

        assert wrong_pw.value.message == unknown.value.message == "Invalid credentials"
        assert wrong_pw.value.status_code == unknown.value.status_code


def test_service_tokens_use_configured_lifetime(database: Database, settings: Settings) -> None:
    settings = settings.model_copy(update={"ACCESS_TOKEN_EXPIRE_MINUTES": 15})
    with database.session() as db:
        auth = AuthService(CredentialStore(db), settings)
        for token in [auth.register("alice", "a@x.com", "pw1"), auth.login("alice", "pw1")]:
            payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])
            assert payload["exp"] - payload["iat"] == 15 * 60
