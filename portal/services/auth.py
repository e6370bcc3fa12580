"""Registration and login flow over the credential store and the hasher."""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from portal.core.errors import (
    LOGIN_FORM,
    REGISTER_FORM,
    CredentialMismatch,
    NotFoundFailure,
    StoreFailure,
    ValidationFailure,
)
from portal.core.security import hash_password, verify_password
from portal.schemas.credentials import Credentials
from portal.services.credentials import UsernameTaken, create_user, get_user
from portal.sessions.store import SessionUser

logger = logging.getLogger(__name__)


def require_credentials(username: str | None, password: str | None, *, form: str) -> Credentials:
    """Both fields present and non-empty; nothing else is enforced."""
    username = (username or "").strip()
    if not username or not password:
        raise ValidationFailure(form=form)
    return Credentials(username=username, password=password)


async def register_user(db: AsyncSession, creds: Credentials) -> None:
    try:
        hashed = await run_in_threadpool(hash_password, creds.password)
        await create_user(db, creds.username, hashed)
    except UsernameTaken:
        logger.info("Registration rejected: username %r already exists", creds.username)
        raise StoreFailure(form=REGISTER_FORM, code="taken")
    except (SQLAlchemyError, OSError, ValueError) as exc:
        logger.error("Registration error: %s", exc)
        raise StoreFailure(form=REGISTER_FORM, code="failed") from exc
    logger.info("Registered user %r", creds.username)


async def authenticate(db: AsyncSession, creds: Credentials) -> SessionUser:
    """Return the public record of the user whose password matches.

    Any failure of the store or the hasher (including a refused connection,
    which asyncpg raises as a bare OSError) is answered as StoreFailure.
    """
    try:
        user = await get_user(db, creds.username)
        match = user is not None and await run_in_threadpool(
            verify_password, creds.password, user.password_hash
        )
    except Exception as exc:
        logger.error("Login error: %s", exc)
        raise StoreFailure(form=LOGIN_FORM) from exc

    if user is None:
        raise NotFoundFailure(form=LOGIN_FORM)
    if not match:
        raise CredentialMismatch(form=LOGIN_FORM)
    return SessionUser(username=user.username)
