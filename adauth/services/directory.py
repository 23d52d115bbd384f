from __future__ import annotations

from ..directory import DirectoryConfig
from ..env_settings import EnvSettings


def directory_cfg_from_env(env: EnvSettings) -> DirectoryConfig:
    """Build the (immutable) directory configuration from environment settings."""
    timeout = env.directory_connect_timeout
    return DirectoryConfig(
        port=int(env.directory_port),
        user_prefix=env.directory_user_prefix,
        mail_domain=(env.directory_mail_domain or "").strip().lstrip("@"),
        tls_validate=bool(env.directory_tls_validate),
        ca_certs_file=(env.directory_ca_certs_file or "").strip(),
        connect_timeout=int(timeout) if timeout else None,
    )
