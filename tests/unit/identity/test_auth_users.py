"""
Name: Identity Verifier Tests

Responsibilities:
  - Password hashing and verification
  - Token issuing and decoding (expiry, signature, claims)
  - Identity resolution against the live user record
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from taskdesk.crosscutting.exceptions import Unauthenticated
from taskdesk.domain.entities import Identity, UserRole
from taskdesk.identity.auth_users import (
    JWT_ALGORITHM,
    AuthSettings,
    create_access_token,
    decode_access_token,
    extract_bearer_token,
    hash_password,
    verify_password,
)

pytestmark = pytest.mark.unit


def test_hash_and_verify_password():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret123", "not-a-hash")


def test_hashes_are_salted():
    assert hash_password("secret123") != hash_password("secret123")


def test_token_carries_claims_and_24h_expiry(admin, auth_settings):
    token, expires_in = create_access_token(admin, settings=auth_settings)

    payload = jwt.decode(token, auth_settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    assert payload["sub"] == str(admin.id)
    assert payload["email"] == admin.email
    assert payload["role"] == "admin"
    assert expires_in == 24 * 60 * 60
    assert payload["exp"] - payload["iat"] == expires_in

    decoded = decode_access_token(token, settings=auth_settings)
    assert decoded.user_id == admin.id
    assert decoded.role == UserRole.ADMIN


def test_expired_token_rejected(admin, auth_settings):
    past = datetime.now(timezone.utc) - timedelta(hours=25)
    token = jwt.encode(
        {
            "sub": str(admin.id),
            "email": admin.email,
            "role": "admin",
            "iat": int(past.timestamp()),
            "exp": int((past + timedelta(hours=24)).timestamp()),
        },
        auth_settings.jwt_secret,
        algorithm=JWT_ALGORITHM,
    )

    with pytest.raises(Unauthenticated, match="Token expired"):
        decode_access_token(token, settings=auth_settings)


def test_bad_signature_rejected(admin, auth_settings):
    other = AuthSettings(jwt_secret="another-secret-another-secret-123", jwt_access_ttl_minutes=60)
    token, _ = create_access_token(admin, settings=other)

    with pytest.raises(Unauthenticated, match="Invalid token"):
        decode_access_token(token, settings=auth_settings)


@pytest.mark.parametrize(
    "claims",
    [
        {"email": "a@b.co", "role": "admin"},
        {"sub": "abc", "email": "a@b.co", "role": "admin"},
        {"sub": "1", "email": "a@b.co", "role": "root"},
    ],
)
def test_malformed_claims_rejected(claims, auth_settings):
    exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
    token = jwt.encode({**claims, "exp": exp}, auth_settings.jwt_secret, algorithm=JWT_ALGORITHM)

    with pytest.raises(Unauthenticated, match="Invalid token"):
        decode_access_token(token, settings=auth_settings)


def test_garbage_token_rejected(auth_settings):
    with pytest.raises(Unauthenticated, match="Invalid token"):
        decode_access_token("not.a.jwt", settings=auth_settings)


@pytest.mark.parametrize(
    "header,expected",
    [
        (None, None),
        ("", None),
        ("Bearer abc.def", "abc.def"),
        ("bearer abc.def", "abc.def"),
        ("Token abc.def", None),
        ("Bearer ", None),
    ],
)
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


def test_resolve_returns_identity(verifier, admin):
    token, _ = verifier.issue(admin)

    assert verifier.resolve(token) == Identity.of(admin)


def test_resolve_without_token(verifier):
    with pytest.raises(Unauthenticated, match="No token provided"):
        verifier.resolve(None)


def test_resolve_rejects_deleted_user(verifier, users, make_user):
    ann = make_user(name="Ann")
    token, _ = verifier.issue(ann)
    users.delete_user(ann.id)

    with pytest.raises(Unauthenticated, match="User not found"):
        verifier.resolve(token)


def test_resolve_uses_live_role(verifier, users, make_user):
    ann = make_user(name="Ann", role=UserRole.ADMIN)
    token, _ = verifier.issue(ann)
    users.update_user(ann.id, {"role": UserRole.USER})

    identity = verifier.resolve(token)

    assert identity.role == UserRole.USER
    assert not identity.is_admin
