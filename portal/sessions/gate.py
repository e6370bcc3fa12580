"""Session cookie transport and the auth gate dependency."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request, Response

from portal.core.config import get_settings
from portal.core.errors import AuthorizationFailure
from portal.core.security import sign_session_token, unsign_session_token
from portal.sessions.store import SessionStore, SessionUser


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def session_token(request: Request) -> str | None:
    """Token from the signed session cookie; None if absent or tampered with."""
    return unsign_session_token(request.cookies.get(get_settings().session_cookie_name))


async def get_current_user_optional(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionUser | None:
    """Return the session's user if the cookie maps to a live session; else None."""
    token = session_token(request)
    if token is None:
        return None
    user = await store.get(token)
    if user is not None:
        request.state.user = user
    return user


async def require_session(
    user: Annotated[SessionUser | None, Depends(get_current_user_optional)],
) -> SessionUser:
    """Auth gate: no session, no entry. Answered with a redirect to /login."""
    if user is None:
        raise AuthorizationFailure()
    return user


def cookie_settings() -> dict:
    return {
        "httponly": True,
        "samesite": "lax",
        "secure": get_settings().session_cookie_secure,
        "path": "/",
    }


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=get_settings().session_cookie_name,
        value=sign_session_token(token),
        **cookie_settings(),
    )


def clear_session_cookie(response: Response) -> None:
    # path must match the one used in set_cookie()
    response.delete_cookie(get_settings().session_cookie_name, path="/")
