"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure a hermetic test environment (no .env, in-memory storage, fake email)
  - Provide repositories, services and an API app wired to in-memory fakes
  - Provide user factories and bearer headers

Notes:
  - Env vars are set before importing taskdesk so get_settings() sees them
  - Each test gets fresh repositories (function scope)
"""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("FAKE_EMAIL", "true")
os.environ.setdefault("LOG_JSON", "false")

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from taskdesk.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from taskdesk.api.auth_routes import router as auth_router  # noqa: E402
from taskdesk.api.exception_handlers import register_exception_handlers  # noqa: E402
from taskdesk.api.task_routes import router as task_router  # noqa: E402
from taskdesk.api.user_routes import router as user_router  # noqa: E402
from taskdesk.application.task_lifecycle import TaskLifecycleEngine  # noqa: E402
from taskdesk.application.user_accounts import UserAccountService  # noqa: E402
from taskdesk.container import (  # noqa: E402
    get_identity_verifier,
    get_task_lifecycle_engine,
    get_user_account_service,
)
from taskdesk.crosscutting.middleware import RequestContextMiddleware  # noqa: E402
from taskdesk.domain.access_policy import AuthorizationPolicy  # noqa: E402
from taskdesk.domain.entities import Identity, User, UserRole  # noqa: E402
from taskdesk.identity.auth_users import (  # noqa: E402
    AuthSettings,
    IdentityVerifier,
    hash_password,
)
from taskdesk.infrastructure.notifications import (  # noqa: E402
    FakeEmailSender,
    InProcessEventChannel,
    NotificationDispatcher,
)
from taskdesk.infrastructure.repositories import (  # noqa: E402
    InMemoryTaskRepository,
    InMemoryUserRepository,
)

TEST_JWT_SECRET = "test-secret-value-that-is-long-enough-123"
DEFAULT_PASSWORD = "secret123"


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


# ============================================================================
# Core collaborators
# ============================================================================


@pytest.fixture
def auth_settings() -> AuthSettings:
    return AuthSettings(jwt_secret=TEST_JWT_SECRET, jwt_access_ttl_minutes=24 * 60)


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def tasks() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture
def channel(email_sender: FakeEmailSender) -> InProcessEventChannel:
    channel = InProcessEventChannel()
    channel.subscribe(NotificationDispatcher(email_sender))
    return channel


@pytest.fixture
def policy() -> AuthorizationPolicy:
    return AuthorizationPolicy()


@pytest.fixture
def engine(tasks, users, channel, policy) -> TaskLifecycleEngine:
    return TaskLifecycleEngine(tasks=tasks, users=users, events=channel, policy=policy)


@pytest.fixture
def accounts(users, policy) -> UserAccountService:
    return UserAccountService(users, policy)


@pytest.fixture
def verifier(users, auth_settings) -> IdentityVerifier:
    return IdentityVerifier(users, settings=auth_settings)


# ============================================================================
# User factories
# ============================================================================


@pytest.fixture
def make_user(users):
    """R: Insert a user directly into the store (bypassing the service)."""

    def _make(
        name: str = "User",
        email: str | None = None,
        role: UserRole = UserRole.USER,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        return users.create_user(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            password_hash=hash_password(password),
            role=role,
        )

    return _make


@pytest.fixture
def admin(make_user) -> User:
    return make_user(name="Admin", email="admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def admin_identity(admin) -> Identity:
    return Identity.of(admin)


# ============================================================================
# API
# ============================================================================


@pytest.fixture
def api_app(engine, accounts, verifier) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(auth_router, prefix="/api")
    app.include_router(user_router, prefix="/api")
    app.include_router(task_router, prefix="/api")

    app.dependency_overrides[get_task_lifecycle_engine] = lambda: engine
    app.dependency_overrides[get_user_account_service] = lambda: accounts
    app.dependency_overrides[get_identity_verifier] = lambda: verifier
    return app


@pytest.fixture
def client(api_app) -> TestClient:
    return TestClient(api_app)


@pytest.fixture
def auth_header(verifier):
    """R: Build an Authorization header for a stored user."""

    def _header(user: User) -> dict[str, str]:
        token, _ = verifier.issue(user)
        return {"Authorization": f"Bearer {token}"}

    return _header
