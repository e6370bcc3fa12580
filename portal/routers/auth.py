"""Public routes: landing, login, register. Server-side sessions via signed cookie."""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import LOGIN_FORM, REGISTER_FORM, REGISTER_MESSAGES
from portal.db.session import get_db
from portal.schemas.credentials import Credentials
from portal.services.auth import authenticate, register_user, require_credentials
from portal.sessions.gate import get_session_store, session_token, set_session_cookie
from portal.sessions.store import SessionStore
from portal.web import render

logger = logging.getLogger(__name__)

router = APIRouter()


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


async def read_credentials(request: Request, form: str) -> Credentials:
    """Accept the pair as an urlencoded/multipart form or as a JSON object."""
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = {}
    else:
        data = await request.form()

    username = data.get("username")
    password = data.get("password")
    return require_credentials(
        username if isinstance(username, str) else None,
        password if isinstance(password, str) else None,
        form=form,
    )


@router.get("/")
async def landing():
    return _redirect("/login")


@router.get("/login", response_class=HTMLResponse)
async def login_get(request: Request):
    """Show login form."""
    return render(request, "pages/login.html")


@router.post("/login")
async def login_post(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    store: Annotated[SessionStore, Depends(get_session_store)],
):
    """Check credentials, start a fresh session and go to /discover."""
    creds = await read_credentials(request, LOGIN_FORM)
    user = await authenticate(db, creds)

    previous = session_token(request)
    if previous is not None:
        await store.destroy(previous)
    token = await store.create(user)
    logger.info("User %r logged in", user.username)

    response = _redirect("/discover")
    set_session_cookie(response, token)
    return response


@router.get("/register", response_class=HTMLResponse)
async def register_get(request: Request, error: str | None = None):
    """Show register form, with the message for ?error= if one was given."""
    message = REGISTER_MESSAGES.get(error) if error else None
    return render(
        request,
        "pages/register.html",
        {"message": message, "error": message is not None},
    )


@router.post("/register")
async def register_post(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create user, then send them to the login form."""
    creds = await read_credentials(request, REGISTER_FORM)
    await register_user(db, creds)
    return _redirect("/login")
