from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from ..env_settings import get_env
from ..repo import db_session
from ..services import LoginPipeline, audit_login, build_pipeline, result_code
from ..session import SESSION_COOKIE, session_payload
from ..webui import htmx_alert, set_session_cookie, templates, ui_result


router = APIRouter()
log = logging.getLogger(__name__)

NOT_PROVISIONED_MESSAGE = "Your directory login is valid, but you do not have an account here."
INVALID_MESSAGE = "Invalid username or password."


@lru_cache(maxsize=1)
def get_pipeline() -> LoginPipeline:
    return build_pipeline(get_env())


def _is_hx(request: Request) -> bool:
    return bool(request.headers.get("HX-Request"))


def _login_error(request: Request, message: str, *, shake: bool = False, username: str = "") -> Response:
    if _is_hx(request):
        headers = {"HX-Trigger": "shake"} if shake else None
        return htmx_alert(ui_result(False, message), status_code=200, headers=headers)
    return templates.TemplateResponse(
        request,
        "login.html",
        {"error": message, "shake": shake, "username": username},
    )


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request):
    return templates.TemplateResponse(request, "login.html", {"error": "", "shake": False, "username": ""})


@router.post("/login")
async def login(request: Request):
    form = await request.form()
    username = str(form.get("username") or "").strip()
    password = str(form.get("password") or "")
    ip = request.client.host if request.client else ""
    ua = request.headers.get("user-agent", "")

    if not username:
        return _login_error(request, "Enter your username.")
    if not password:
        return _login_error(request, "Enter your password.", username=username)

    with db_session() as db:
        result = get_pipeline().run(db, username, password)
        code = result_code(result)
        audit_login(db, username, result.auth or "directory", result.success, ip, ua, code, result.error_message)

        if not result.success:
            return _login_error(request, result.error_message or INVALID_MESSAGE, shake=result.shake, username=username)
        if result.account is None:
            return _login_error(request, NOT_PROVISIONED_MESSAGE, username=username)

        payload = session_payload(result.account, result.auth)

    log.info("Login ok: user=%s auth=%s", payload["login"], payload["auth"])
    if _is_hx(request):
        resp: Response = Response(status_code=200, headers={"HX-Redirect": "/"})
    else:
        resp = RedirectResponse(url="/", status_code=303)
    set_session_cookie(resp, payload)
    return resp


@router.get("/logout")
def logout():
    resp = RedirectResponse(url="/login", status_code=303)
    resp.delete_cookie(SESSION_COOKIE)
    return resp
