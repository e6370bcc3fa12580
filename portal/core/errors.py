"""Failure kinds for the auth flow and their single mapping to HTTP responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from portal.web import render

logger = logging.getLogger(__name__)

LOGIN_FORM = "login"
REGISTER_FORM = "register"

# Messages shown on the registration page, keyed by the ?error= code
REGISTER_MESSAGES = {
    "invalid": "Please enter a username and password.",
    "taken": "That username is already registered.",
    "failed": "Registration failed. Please try again.",
}


class PortalError(Exception):
    """Base class: every failure the handlers know how to answer."""

    message = "Something went wrong."
    code = "failed"

    def __init__(self, message: str | None = None, *, form: str | None = None, code: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if code:
            self.code = code
        self.form = form


class ValidationFailure(PortalError):
    message = "Please enter a username and password."
    code = "invalid"


class NotFoundFailure(PortalError):
    message = "Username not found. Please register."


class CredentialMismatch(PortalError):
    message = "Incorrect username or password."


class StoreFailure(PortalError):
    message = "An error occurred during login. Please try again."


class SessionFailure(PortalError):
    message = "Could not log out."


class AuthorizationFailure(PortalError):
    """No session. Gated routes redirect; self-checked routes answer 401."""

    message = "Not authenticated"

    def __init__(self, message: str | None = None, *, redirect: bool = True):
        super().__init__(message)
        self.redirect = redirect


class RenderFailure(PortalError):
    message = "Internal Server Error"


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def error_response(request: Request, exc: PortalError):
    if isinstance(exc, AuthorizationFailure):
        if exc.redirect:
            return _redirect("/login")
        return PlainTextResponse(exc.message, status_code=401)

    if isinstance(exc, SessionFailure):
        return PlainTextResponse(exc.message, status_code=500)

    if isinstance(exc, RenderFailure):
        return PlainTextResponse(exc.message, status_code=500)

    if exc.form == REGISTER_FORM:
        code = exc.code if exc.code in REGISTER_MESSAGES else "failed"
        return _redirect(f"/register?error={code}")

    # Login form: the only surface with structured messages
    return render(request, "pages/login.html", {"message": exc.message, "error": True})


async def portal_error_handler(request: Request, exc: PortalError):
    logger.info("%s on %s %s", type(exc).__name__, request.method, request.url.path)
    return error_response(request, exc)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
