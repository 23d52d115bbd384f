from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from .directory.models import AD_CONTROLLER


class EnvSettings(BaseSettings):
    secret_key: str = Field(..., alias="APP_SECRET_KEY")
    cookie_secure: bool = Field(False, alias="APP_COOKIE_SECURE")
    sqlite_path: str = Field("data/app.db", alias="SQLITE_PATH")

    bootstrap_admin_user: str = Field("admin", alias="BOOTSTRAP_ADMIN_USER")
    bootstrap_admin_password: str = Field("", alias="BOOTSTRAP_ADMIN_PASSWORD")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_retention_days: int = Field(30, alias="LOG_RETENTION_DAYS")
    log_max_size_mb: int = Field(50, alias="LOG_MAX_SIZE_MB")
    log_dir: str = Field("data/logs", alias="LOG_DIR")

    # Directory. Hostnames, search bases and filters are fixed per endpoint (directory/models.py).
    directory_enabled: bool = Field(True, alias="DIRECTORY_ENABLED")
    directory_endpoint: str = Field(AD_CONTROLLER, alias="DIRECTORY_ENDPOINT")
    directory_port: int = Field(636, alias="DIRECTORY_PORT")
    directory_user_prefix: str = Field("AD\\", alias="DIRECTORY_USER_PREFIX")
    directory_mail_domain: str = Field("colorado.edu", alias="DIRECTORY_MAIL_DOMAIN")
    directory_tls_validate: bool = Field(False, alias="DIRECTORY_TLS_VALIDATE")
    directory_ca_certs_file: str = Field("", alias="DIRECTORY_CA_CERTS_FILE")
    directory_connect_timeout: Optional[int] = Field(None, alias="DIRECTORY_CONNECT_TIMEOUT")

    model_config = SettingsConfigDict(populate_by_name=True)


@lru_cache(maxsize=1)
def get_env() -> EnvSettings:
    return EnvSettings()
