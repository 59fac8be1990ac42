"""Jinja2 environment and the render helper used by every page."""
from fastapi import Request
from fastapi.templating import Jinja2Templates

from app.core.config import BASE_DIR

templates = Jinja2Templates(directory=str(BASE_DIR / "app" / "templates"))


def render(request: Request, template_name: str, ctx: dict | None = None, status_code: int = 200):
    """TemplateResponse wrapper; consumes the session flash so it shows exactly once."""
    session = getattr(request.state, "session", None)
    base_ctx = {
        "flash": session.pop_flash() if session else None,
        "is_authenticated": bool(session and session.is_authenticated),
    }
    return templates.TemplateResponse(
        request=request,
        name=template_name,
        context={**base_ctx, **(ctx or {})},
        status_code=status_code,
    )
