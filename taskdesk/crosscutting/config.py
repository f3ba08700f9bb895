"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults suitable for local development

Collaborators:
  - main.py: reads settings for CORS, API prefix and startup validation
  - container.py: picks storage backend and email sender
  - identity.auth_users: JWT secret and TTL

Constraints:
  - No business logic, pure configuration
  - Production requires a strong JWT secret and a database URL

Notes:
  - Singleton via lru_cache
  - Env vars are case-insensitive (JWT_SECRET -> jwt_secret)
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_POSTGRES = "postgres"
STORAGE_MEMORY = "memory"

_INSECURE_SECRETS = {"dev-secret", "changeme", "change-me", "password", "secret"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (local/development/test/production)
        api_prefix: Prefix for all API routers (default: /api)
        allowed_origins: Comma-separated CORS origins
        storage_backend: "postgres" or "memory"
        database_url: PostgreSQL connection string
        jwt_secret: Secret for signing access tokens
        jwt_access_ttl_minutes: Access token TTL (default: 24h)
        allow_admin_registration: Allow POST /auth/register with role=admin
        fake_email: Record emails in memory instead of sending them
        smtp_*: Outgoing mail server configuration
    """

    # Environment
    app_env: str = "development"
    api_prefix: str = "/api"

    # CORS configuration
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"
    cors_allow_credentials: bool = True

    # Storage
    storage_backend: str = STORAGE_POSTGRES
    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Security - JWT Auth
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = 24 * 60

    # Registration
    allow_admin_registration: bool = False

    # Email notifications
    fake_email: bool = False
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    smtp_use_ssl: bool = True
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    smtp_timeout_seconds: float = 10.0

    # Dev Tools
    dev_seed_admin: bool = False
    dev_seed_admin_name: str = "Admin"
    dev_seed_admin_email: str = "admin@localhost.dev"
    dev_seed_admin_password: str = "admin123"

    @field_validator("storage_backend")
    @classmethod
    def storage_backend_valid(cls, v: str) -> str:
        backend = (v or STORAGE_POSTGRES).strip().lower()
        if backend not in {STORAGE_POSTGRES, STORAGE_MEMORY}:
            raise ValueError("storage_backend must be 'postgres' or 'memory'")
        return backend

    @field_validator("jwt_access_ttl_minutes")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("jwt_access_ttl_minutes must be greater than 0")
        return v

    @field_validator("api_prefix")
    @classmethod
    def api_prefix_normalized(cls, v: str) -> str:
        prefix = (v or "").strip().rstrip("/")
        if prefix and not prefix.startswith("/"):
            prefix = f"/{prefix}"
        return prefix

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in _INSECURE_SECRETS:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        if self.uses_postgres() and not self.database_url.strip():
            raise ValueError("DATABASE_URL is required in production")
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def uses_postgres(self) -> bool:
        return self.storage_backend == STORAGE_POSTGRES

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
