"""Application service layer.

Stable import surface for routers:
    from adauth.services import ...
"""

from .audit import audit_login, result_code
from .directory import directory_cfg_from_env
from .auth.backend import AuthResult, LoginPipeline, build_pipeline

__all__ = [
    "audit_login",
    "result_code",
    "directory_cfg_from_env",
    "AuthResult",
    "LoginPipeline",
    "build_pipeline",
]
