"""Password hashing and session cookie signing."""
import hashlib
import hmac

from passlib.context import CryptContext

from portal.core.config import get_settings


def _make_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


pwd_context = _make_context(get_settings().bcrypt_rounds)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


# Session cookie: <token>.<hmac-sha256(token)>
def _signature(value: str) -> str:
    secret = get_settings().session_secret
    return hmac.new(secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256).hexdigest()


def sign_session_token(token: str) -> str:
    """Attach a signature to an opaque session token (cookie value)."""
    return f"{token}.{_signature(token)}"


def unsign_session_token(value: str | None) -> str | None:
    """Return the session token if the cookie signature is valid; None otherwise."""
    if not value or "." not in value:
        return None
    token, sig = value.rsplit(".", 1)
    if not token or not hmac.compare_digest(_signature(token), sig):
        return None
    return token
