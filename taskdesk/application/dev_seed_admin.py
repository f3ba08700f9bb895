"""
Name: Dev Seed Admin (local only)

Responsibilities:
  - Ensure a development admin exists when DEV_SEED_ADMIN is enabled
  - Refuse to run outside APP_ENV=local

Collaborators:
  - crosscutting.config.Settings: dev_seed_admin_* values
  - domain.repositories.UserRepository
  - identity.auth_users.hash_password (injected as password_hasher)

Notes:
  - Idempotent: an existing user with the seed email is left untouched
"""

from __future__ import annotations

from typing import Callable

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.entities import UserRole
from ..domain.repositories import UserRepository


def _assert_allowed_environment(settings: Settings) -> None:
    env = (settings.app_env or "").strip().lower()
    if env != "local":
        raise RuntimeError(
            f"FATAL: DEV_SEED_ADMIN is enabled but APP_ENV is '{env}' "
            "(must be 'local')."
        )


def ensure_dev_admin(
    settings: Settings,
    *,
    user_repo: UserRepository,
    password_hasher: Callable[[str], str],
) -> None:
    """
    Ensure a development admin user exists if configured.

    Raises:
        RuntimeError: seeding enabled outside the local environment
        ValueError: seeding enabled with an empty email or password
    """
    if not settings.dev_seed_admin:
        return

    _assert_allowed_environment(settings)

    email = (settings.dev_seed_admin_email or "").strip()
    password = settings.dev_seed_admin_password or ""
    if not email or not password:
        raise ValueError("Dev seed admin is enabled but email/password are empty")

    if user_repo.get_user_by_email(email) is not None:
        logger.info("Dev seed admin: user exists; skipping", extra={"email": email})
        return

    user_repo.create_user(
        name=settings.dev_seed_admin_name or "Admin",
        email=email,
        password_hash=password_hasher(password),
        role=UserRole.ADMIN,
    )
    logger.info("Dev seed admin: user created", extra={"email": email})
