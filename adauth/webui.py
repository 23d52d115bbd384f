from __future__ import annotations

from html import escape
from pathlib import Path

from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from .env_settings import get_env
from .session import SESSION_COOKIE, SESSION_MAX_AGE, create_session


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def ui_result(ok: bool, message: str, details: str | None = None) -> dict:
    """Result shape for HTMX interactions: {"ok": bool, "message": str, "details": str}."""
    return {
        "ok": bool(ok),
        "message": str(message or ""),
        "details": str(details or ""),
    }


def htmx_alert(result: dict, *, status_code: int = 200, headers: dict | None = None) -> HTMLResponse:
    """Bootstrap alert snippet for HTMX swaps."""
    ok = bool(result.get("ok"))
    message = escape(str(result.get("message") or ""))
    details = escape(str(result.get("details") or ""))

    if not message and not details:
        level = "secondary"
    else:
        level = "success" if ok else "danger"

    parts: list[str] = [f"<div class='alert alert-{level} py-2 mb-0'>"]
    if message:
        parts.append(f"<div>{message}</div>")
    if details:
        parts.append(f"<div class='small mt-1'><code>{details}</code></div>")
    parts.append("</div>")
    return HTMLResponse("".join(parts), status_code=status_code, headers=headers)


def set_session_cookie(resp: Response, payload: dict) -> None:
    resp.set_cookie(
        key=SESSION_COOKIE,
        value=create_session(payload),
        httponly=True,
        secure=get_env().cookie_secure,
        samesite="lax",
        max_age=SESSION_MAX_AGE,
    )
