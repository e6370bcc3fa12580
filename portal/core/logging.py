"""Logging setup and per-request access log."""
import logging

from fastapi import Request

logger = logging.getLogger("portal.requests")


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger("portal")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)


async def log_requests(request: Request, call_next):
    """Log incoming requests and their outcomes."""
    logger.info("request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request %s %s failed", request.method, request.url.path)
        raise
    logger.info(
        "response %s %s status %s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response
