"""
Name: Settings Tests

Responsibilities:
  - Production guards (JWT secret strength, DATABASE_URL)
  - Normalization of storage backend, API prefix and CORS origins
"""

import pytest

from taskdesk.crosscutting.config import STORAGE_MEMORY, STORAGE_POSTGRES, Settings

pytestmark = pytest.mark.unit

STRONG_SECRET = "s" * 40


def test_defaults_are_development_friendly():
    settings = Settings(app_env="development", storage_backend="postgres")

    assert settings.jwt_access_ttl_minutes == 24 * 60
    assert settings.api_prefix == "/api"
    assert settings.allow_admin_registration is False
    assert settings.uses_postgres() is True
    assert settings.is_production() is False


@pytest.mark.parametrize("secret", ["dev-secret", "changeme", "", "short-secret"])
def test_production_rejects_weak_secrets(secret):
    with pytest.raises(ValueError):
        Settings(
            app_env="production",
            jwt_secret=secret,
            database_url="postgresql://db/taskdesk",
        )


def test_production_requires_database_url_for_postgres():
    with pytest.raises(ValueError, match="DATABASE_URL"):
        Settings(
            app_env="production",
            jwt_secret=STRONG_SECRET,
            storage_backend=STORAGE_POSTGRES,
            database_url="",
        )


def test_production_with_memory_storage_needs_no_database():
    settings = Settings(
        app_env="Production",
        jwt_secret=STRONG_SECRET,
        storage_backend=STORAGE_MEMORY,
        database_url="",
    )

    assert settings.is_production() is True
    assert settings.uses_postgres() is False


def test_storage_backend_is_normalized_and_validated():
    assert Settings(storage_backend=" MEMORY ").storage_backend == STORAGE_MEMORY

    with pytest.raises(ValueError):
        Settings(storage_backend="sqlite")


def test_ttl_must_be_positive():
    with pytest.raises(ValueError):
        Settings(jwt_access_ttl_minutes=0)


@pytest.mark.parametrize(
    "raw,expected", [("/api", "/api"), ("api/", "/api"), ("/v1/", "/v1"), ("", "")]
)
def test_api_prefix_normalized(raw, expected):
    assert Settings(api_prefix=raw).api_prefix == expected


def test_allowed_origins_list():
    settings = Settings(allowed_origins=" http://a.test , ,http://b.test")

    assert settings.get_allowed_origins_list() == ["http://a.test", "http://b.test"]
