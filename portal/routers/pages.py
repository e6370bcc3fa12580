"""Routes behind the session: discover, logout, profile."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from portal.core.errors import AuthorizationFailure, RenderFailure, SessionFailure
from portal.sessions.gate import (
    clear_session_cookie,
    get_current_user_optional,
    get_session_store,
    require_session,
    session_token,
)
from portal.sessions.store import SessionStore, SessionUser
from portal.web import render

logger = logging.getLogger(__name__)

# Mounted behind require_session in main.py
router = APIRouter()

# Mounted without the gate: /profile answers 401 itself
profile_router = APIRouter()


@router.get("/discover", response_class=HTMLResponse, dependencies=[Depends(require_session)])
async def discover(request: Request):
    return render(request, "pages/discover.html")


@router.get("/logout", response_class=HTMLResponse)
async def logout(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
):
    """Destroy the session and show the confirmation page."""
    token = session_token(request)
    if token is not None:
        try:
            await store.destroy(token)
        except Exception as exc:
            logger.error("Session destruction error: %s", exc)
            raise SessionFailure() from exc
    request.state.user = None

    response = render(
        request,
        "pages/logout.html",
        {"message": "Logged out Successfully", "error": False},
    )
    clear_session_cookie(response)
    return response


@profile_router.get("/profile", response_class=HTMLResponse)
async def profile(
    request: Request,
    user: Annotated[SessionUser | None, Depends(get_current_user_optional)],
):
    if user is None:
        raise AuthorizationFailure(redirect=False)
    try:
        return render(request, "pages/profile.html", {"username": user.username})
    except Exception as exc:
        logger.exception("Profile error")
        raise RenderFailure() from exc
