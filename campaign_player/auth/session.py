from __future__ import annotations

from dataclasses import dataclass

from campaign_player.enums import UserRoleEnum
from campaign_player.schemas.users import User


@dataclass
class AuthSession:
    token: str
    user: User

    @property
    def role(self) -> UserRoleEnum:
        return self.user.role

    @property
    def cache_scope(self) -> str:
        return f"user:{self.user.id}"

    def has_role(self, *roles: UserRoleEnum) -> bool:
        return self.user.role in roles


class SessionStore:
    """
    The one place signed-in sessions are read and written, keyed by the platform bearer token.

    The cached user (and its role) is what role checks use; it is not re-verified with the platform.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, AuthSession] = {}

    def save(self, session: AuthSession) -> AuthSession:
        self._sessions[session.token] = session
        return session

    def get(self, token: str) -> AuthSession | None:
        return self._sessions.get(token)

    def discard(self, token: str) -> AuthSession | None:
        return self._sessions.pop(token, None)

    def clear(self) -> None:
        self._sessions.clear()
