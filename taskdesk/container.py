"""
Name: Composition Root (manual DI)

Responsibilities:
  - Build repositories, the identity verifier, the lifecycle engine, the
    account service and the notification pipeline
  - Choose runtime adapters from Settings (storage backend, email sender)
  - Keep process-wide singletons via lru_cache

Collaborators:
  - crosscutting.config.get_settings
  - infrastructure.repositories, infrastructure.notifications
  - application.task_lifecycle, application.user_accounts

Notes:
  - No business logic here
  - No FastAPI imports: factories are plain callables used by Depends()
  - Tests reset state with reset_container() or override the factories
"""

from __future__ import annotations

from functools import lru_cache

from .application.task_lifecycle import TaskLifecycleEngine
from .application.user_accounts import UserAccountService
from .crosscutting.config import get_settings
from .crosscutting.logger import logger
from .domain.access_policy import AuthorizationPolicy
from .domain.repositories import TaskRepository, UserRepository
from .identity.auth_users import IdentityVerifier, get_auth_settings
from .infrastructure.notifications import (
    EmailSender,
    FakeEmailSender,
    InProcessEventChannel,
    NotificationDispatcher,
    SmtpEmailSender,
)
from .infrastructure.repositories import (
    InMemoryTaskRepository,
    InMemoryUserRepository,
    PostgresTaskRepository,
    PostgresUserRepository,
)

# =============================================================================
# Repositories (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    if get_settings().uses_postgres():
        return PostgresUserRepository()
    return InMemoryUserRepository()


@lru_cache(maxsize=1)
def get_task_repository() -> TaskRepository:
    if get_settings().uses_postgres():
        return PostgresTaskRepository()
    return InMemoryTaskRepository()


# =============================================================================
# Notifications
# =============================================================================


@lru_cache(maxsize=1)
def get_email_sender() -> EmailSender:
    settings = get_settings()
    if settings.fake_email:
        return FakeEmailSender()
    if not settings.smtp_username:
        logger.warning(
            "SMTP credentials not configured; emails will likely be rejected",
            extra={"smtp_host": settings.smtp_host},
        )
    return SmtpEmailSender(settings)


@lru_cache(maxsize=1)
def get_event_channel() -> InProcessEventChannel:
    channel = InProcessEventChannel()
    channel.subscribe(NotificationDispatcher(get_email_sender()))
    return channel


# =============================================================================
# Identity, policy and services
# =============================================================================


@lru_cache(maxsize=1)
def get_authorization_policy() -> AuthorizationPolicy:
    return AuthorizationPolicy()


@lru_cache(maxsize=1)
def get_identity_verifier() -> IdentityVerifier:
    return IdentityVerifier(get_user_repository(), settings=get_auth_settings())


@lru_cache(maxsize=1)
def get_task_lifecycle_engine() -> TaskLifecycleEngine:
    return TaskLifecycleEngine(
        tasks=get_task_repository(),
        users=get_user_repository(),
        events=get_event_channel(),
        policy=get_authorization_policy(),
    )


@lru_cache(maxsize=1)
def get_user_account_service() -> UserAccountService:
    return UserAccountService(
        get_user_repository(),
        get_authorization_policy(),
        allow_admin_registration=get_settings().allow_admin_registration,
    )


def reset_container() -> None:
    """R: Drop every cached singleton (tests, settings reload)."""
    for factory in (
        get_user_repository,
        get_task_repository,
        get_email_sender,
        get_event_channel,
        get_authorization_policy,
        get_identity_verifier,
        get_task_lifecycle_engine,
        get_user_account_service,
    ):
        factory.cache_clear()
