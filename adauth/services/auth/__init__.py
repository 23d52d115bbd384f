from .backend import AuthResult, LoginPipeline, build_pipeline
from .directory import DENIED_MESSAGE, DirectoryAuthenticator

__all__ = ["AuthResult", "LoginPipeline", "build_pipeline", "DENIED_MESSAGE", "DirectoryAuthenticator"]
