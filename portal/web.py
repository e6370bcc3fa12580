"""Jinja2 templates shared by the routers and the error handlers."""
from fastapi import Request
from fastapi.templating import Jinja2Templates

from portal.core.config import BASE_DIR

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def render(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    """TemplateResponse wrapper injecting the signed-in user, if any."""
    base_ctx = {"current_user": getattr(request.state, "user", None)}
    return templates.TemplateResponse(
        request,
        name,
        {**base_ctx, **(context or {})},
        status_code=status_code,
    )
