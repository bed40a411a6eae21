"""
Password hashing, access tokens and the authorization dependency.

Tokens are stateless JWTs carrying the user id as ``sub`` and an ``exp``
claim; there is no server-side revocation list.
"""
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import bcrypt
import jwt
from fastapi import Request, Security
from fastapi.security import APIKeyHeader

from todo_api.config import Settings
from todo_api.errors import DuplicateUser, InvalidCredentials, InvalidToken, Unauthenticated
from todo_api.store import CredentialStore

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-auth-token"

api_key_header = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)


def get_password_hash(password: str, rounds: int = 10) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or over-long password.
        return False


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    """Hash checked against when the username is unknown, so both login failures cost the same."""
    return get_password_hash("not-a-real-password", rounds=rounds)


def create_access_token(
    user_id: int,
    secret: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(hours=1))
    payload = {"sub": str(user_id), "iat": now, "exp": expire}
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, algorithm: str = "HS256") -> int:
    """Return the user id embedded in ``token`` or raise InvalidToken."""
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token has expired")
    except jwt.InvalidTokenError:
        raise InvalidToken()

    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidToken()


class AuthService:
    """Registration, login and token verification against a CredentialStore."""

    def __init__(self, users: CredentialStore, settings: Settings):
        self.users = users
        self.settings = settings

    def _issue_token(self, user_id: int) -> str:
        return create_access_token(
            user_id,
            self.settings.JWT_SECRET,
            algorithm=self.settings.JWT_ALGORITHM,
            expires_delta=timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )

    def register(self, username: str, email: str, password: str) -> str:
        if self.users.get_by_username(username) is not None:
            logger.info("Registration rejected: username %r already exists", username)
            raise DuplicateUser("User already exists")
        if self.users.get_by_email(email) is not None:
            logger.info("Registration rejected: email already registered for %r", username)
            raise DuplicateUser("Email already registered")

        password_hash = get_password_hash(password, rounds=self.settings.BCRYPT_ROUNDS)
        user = self.users.add(username=username, email=email, password_hash=password_hash)
        logger.info("User registered: %s (id=%s)", user.username, user.id)
        return self._issue_token(user.id)

    def login(self, username: str, password: str) -> str:
        user = self.users.get_by_username(username)
        if user is None:
            verify_password(password, _dummy_hash(self.settings.BCRYPT_ROUNDS))
            logger.info("Failed login for %r", username)
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.info("Failed login for %r", username)
            raise InvalidCredentials()
        return self._issue_token(user.id)

    def verify_token(self, token: str) -> int:
        return decode_access_token(token, self.settings.JWT_SECRET, self.settings.JWT_ALGORITHM)


def get_current_user_id(request: Request, token: Optional[str] = Security(api_key_header)) -> int:
    """
    Resolve the caller's user id from the ``x-auth-token`` header.

    Runs before any store access; the database is never opened for a
    request that fails here.
    """
    if not token:
        raise Unauthenticated("No token, authorization denied")

    settings: Settings = request.app.state.settings
    try:
        return decode_access_token(token, settings.JWT_SECRET, settings.JWT_ALGORITHM)
    except InvalidToken:
        raise Unauthenticated("Token is not valid")
