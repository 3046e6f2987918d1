"""
Logged-in user context.

A ``SessionHolder`` lives as long as the client process: ``login`` creates
a session, ``logout`` clears it. Workflows receive the current
``UserSession`` snapshot and only ever read it.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class UserSession:
    user_id: str
    full_name: str
    phone: str
    email: str

    @classmethod
    def from_user(cls, user: dict) -> "UserSession":
        """Builds a session from the user document an auth service returns."""
        return cls(
            user_id=str(user.get("id") or user.get("_id") or ""),
            full_name=user.get("fullName", ""),
            phone=user.get("phone", ""),
            email=user.get("email", ""),
        )


class SessionHolder:
    def __init__(self):
        self._current: UserSession | None = None

    @property
    def current(self) -> UserSession | None:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def login(self, user: dict) -> UserSession:
        self._current = UserSession.from_user(user)
        return self._current

    def logout(self) -> None:
        self._current = None
