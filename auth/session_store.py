from __future__ import annotations

import secrets
from abc import ABC, abstractmethod

from auth.models import Credentials


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class SessionStore(ABC):
    @abstractmethod
    async def create(self, credentials: Credentials) -> str:
        raise NotImplementedError

    @abstractmethod
    async def get(self, session_id: str) -> Credentials | None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def clear(self) -> None:
        raise NotImplementedError


class MemorySessionStore(SessionStore):
    """Process-lifetime session storage. Entries are lost on restart."""

    def __init__(self) -> None:
        self._sessions: dict[str, Credentials] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def create(self, credentials: Credentials) -> str:
        if not credentials.access_token:
            raise ValueError("Refusing to create a session without an access token.")

        session_id = new_session_id()
        while session_id in self._sessions:
            session_id = new_session_id()
        self._sessions[session_id] = credentials
        return session_id

    async def get(self, session_id: str) -> Credentials | None:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def clear(self) -> None:
        self._sessions.clear()
