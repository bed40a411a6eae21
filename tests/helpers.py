# tests/helpers.py

from __future__ import annotations

from todo_api.auth import TOKEN_HEADER

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


def auth_header(token: str) -> dict[str, str]:
    return {TOKEN_HEADER: token}
