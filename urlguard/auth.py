from __future__ import annotations

import re
import time

from .models import AuthResult, User
from .storage import JsonStore

# Demo-only login: any well-formed email with a 4+ character password is accepted.
AUTH_KEY = "urlguard_auth"
USER_KEY = "urlguard_user"

MIN_PASSWORD_LENGTH = 4

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or ""))


class MockAuth:
    def __init__(self, store: JsonStore):
        self.store = store

    def login(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            return AuthResult(success=False, error="Email and password are required")
        if not is_valid_email(email):
            return AuthResult(success=False, error="Invalid email format")
        if len(password) < MIN_PASSWORD_LENGTH:
            return AuthResult(success=False, error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        user = User(email=email, login_time=int(time.time() * 1000))
        self.store.set(USER_KEY, user.model_dump())
        self.store.set(AUTH_KEY, True)
        return AuthResult(success=True, user=user)

    def logout(self) -> AuthResult:
        self.store.remove(AUTH_KEY, USER_KEY)
        return AuthResult(success=True)

    def is_logged_in(self) -> bool:
        return self.store.get(AUTH_KEY) is True

    def get_user(self) -> User | None:
        raw = self.store.get(USER_KEY)
        if not isinstance(raw, dict):
            return None
        try:
            return User.model_validate(raw)
        except ValueError:
            return None
