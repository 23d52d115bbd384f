from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import RedirectResponse, Response

from .session import SESSION_COOKIE, read_session


def current_user(request: Request) -> dict | None:
    token = request.cookies.get(SESSION_COOKIE, "")
    return read_session(token) if token else None


def require_session_or_hx_redirect(request: Request, redirect_to: str = "/login") -> dict | Response:
    """Return the session user, otherwise redirect to the login form.

    - HTMX requests: 401 + HX-Redirect header.
    - Normal navigation: 303 redirect.
    """
    data = current_user(request)
    if data:
        return data

    if request.headers.get("HX-Request"):
        return Response(status_code=status.HTTP_401_UNAUTHORIZED, headers={"HX-Redirect": redirect_to})
    return RedirectResponse(url=redirect_to, status_code=status.HTTP_303_SEE_OTHER)
