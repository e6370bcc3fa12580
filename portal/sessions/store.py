"""Server-side session store.

Handlers only see the ``SessionStore`` contract; the instance lives on
``app.state.session_store`` and is swapped in tests. The default backend is a
process-local dict, so a restart logs every user out.
"""
from __future__ import annotations

import abc
import secrets
from dataclasses import dataclass


@dataclass(frozen=True)
class SessionUser:
    """Public part of a user record; safe to hand to templates."""

    username: str


class SessionStore(abc.ABC):
    @abc.abstractmethod
    async def get(self, token: str) -> SessionUser | None:
        """Return the user bound to ``token``, or None."""

    @abc.abstractmethod
    async def create(self, user: SessionUser) -> str:
        """Bind ``user`` to a fresh opaque token and return the token."""

    @abc.abstractmethod
    async def destroy(self, token: str) -> None:
        """Forget ``token``. Unknown tokens are ignored."""


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._sessions: dict[str, SessionUser] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def get(self, token: str) -> SessionUser | None:
        return self._sessions.get(token)

    async def create(self, user: SessionUser) -> str:
        token = secrets.token_urlsafe(32)
        self._sessions[token] = user
        return token

    async def destroy(self, token: str) -> None:
        self._sessions.pop(token, None)
