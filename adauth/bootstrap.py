"""Application bootstrap: logging, schema, bootstrap admin."""

import logging

from .env_settings import get_env
from .log_config import setup_logging
from .repo import db_session, ensure_bootstrap_admin
from .schema import ensure_schema
from .security import hash_password


log = logging.getLogger(__name__)


def initialize_application() -> None:
    env = get_env()
    setup_logging(
        level=env.log_level,
        retention_days=env.log_retention_days,
        max_size_mb=env.log_max_size_mb,
        log_dir=env.log_dir,
    )

    ensure_schema()

    # Without a configured password there is no local admin; directory logins only.
    if env.bootstrap_admin_password:
        with db_session() as db:
            ensure_bootstrap_admin(db, env.bootstrap_admin_user, hash_password(env.bootstrap_admin_password))
    else:
        log.info("BOOTSTRAP_ADMIN_PASSWORD not set, skipping bootstrap admin")
