from __future__ import annotations

from sqlalchemy.orm import Session

from ..models import LoginAudit
from .auth.backend import AuthResult


def result_code(result: AuthResult) -> str:
    if result.provisioned:
        return "ok"
    if result.success:
        return "not_provisioned"
    return result.error_code or "invalid"


def audit_login(
    db: Session,
    username: str,
    auth_type: str,
    success: bool,
    ip: str,
    ua: str,
    result_code: str,
    details: str = "",
) -> None:
    db.add(
        LoginAudit(
            username=username[:128],
            auth_type=auth_type,
            success=success,
            ip=ip,
            user_agent=ua[:512],
            result_code=result_code,
            details=details[:512],
        )
    )
    db.commit()
