from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from ..deps import require_session_or_hx_redirect
from ..webui import templates


router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    auth = require_session_or_hx_redirect(request)
    if not isinstance(auth, dict):
        return auth
    return templates.TemplateResponse(request, "index.html", {"user": auth})
