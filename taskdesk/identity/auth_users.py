"""
Name: User Authentication (JWT)

Responsibilities:
  - Hash and verify passwords using Argon2
  - Issue signed JWT access tokens (24h fixed expiry by default)
  - Resolve a bearer credential into a live Identity, or reject it

Collaborators:
  - crosscutting.config.get_settings: secret and TTL
  - domain.repositories.UserRepository: live user lookup
  - crosscutting.exceptions.Unauthenticated

Notes:
  - Claims: sub (user id), email, role, iat, exp
  - No refresh and no revocation list: a token dies with its expiry, its
    user record, or a rotation of JWT_SECRET
  - Never log tokens or passwords
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ..crosscutting.config import get_settings
from ..crosscutting.exceptions import Unauthenticated
from ..crosscutting.logger import logger
from ..domain.entities import Identity, User, UserRole
from ..domain.repositories import UserRepository

JWT_ALGORITHM = "HS256"

CLAIM_SUB = "sub"
CLAIM_EMAIL = "email"
CLAIM_ROLE = "role"
CLAIM_IAT = "iat"
CLAIM_EXP = "exp"

_password_hasher = PasswordHasher()


@dataclass(frozen=True)
class AuthSettings:
    jwt_secret: str
    jwt_access_ttl_minutes: int


@dataclass(frozen=True)
class TokenPayload:
    user_id: int
    email: str
    role: UserRole


def get_auth_settings() -> AuthSettings:
    settings = get_settings()
    return AuthSettings(
        jwt_secret=settings.jwt_secret,
        jwt_access_ttl_minutes=settings.jwt_access_ttl_minutes,
    )


def hash_password(password: str) -> str:
    """R: Hash a password using Argon2 (salted)."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """R: Verify password against stored hash."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def create_access_token(
    user: User, settings: AuthSettings | None = None
) -> tuple[str, int]:
    """
    R: Create a signed JWT access token.

    Returns:
        (token, expires_in_seconds)
    """
    auth_settings = settings or get_auth_settings()
    now = datetime.now(timezone.utc)
    expires_in = auth_settings.jwt_access_ttl_minutes * 60
    payload = {
        CLAIM_SUB: str(user.id),
        CLAIM_EMAIL: user.email,
        CLAIM_ROLE: user.role.value,
        CLAIM_IAT: int(now.timestamp()),
        CLAIM_EXP: int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    token = jwt.encode(payload, auth_settings.jwt_secret, algorithm=JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(
    token: str, settings: AuthSettings | None = None
) -> TokenPayload:
    """
    R: Decode and validate a JWT access token.

    Raises:
        Unauthenticated: expired, bad signature, malformed or missing claims
    """
    auth_settings = settings or get_auth_settings()
    try:
        payload = jwt.decode(
            token,
            auth_settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": [CLAIM_SUB, CLAIM_EMAIL, CLAIM_ROLE, CLAIM_EXP]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise Unauthenticated("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise Unauthenticated("Invalid token") from exc

    try:
        user_id = int(payload[CLAIM_SUB])
        role = UserRole(str(payload[CLAIM_ROLE]))
    except (TypeError, ValueError) as exc:
        raise Unauthenticated("Invalid token") from exc

    return TokenPayload(user_id=user_id, email=str(payload[CLAIM_EMAIL]), role=role)


def extract_bearer_token(authorization: str | None) -> str | None:
    """R: Extract token from `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


class IdentityVerifier:
    """
    R: Turns a bearer credential into a resolved Identity.

    Resolution is a pure lookup: the token is verified, then the user it
    names must still exist. Email and role come from the live record.
    """

    def __init__(
        self,
        users: UserRepository,
        settings: AuthSettings | None = None,
    ):
        self.users = users
        self.settings = settings

    def issue(self, user: User) -> tuple[str, int]:
        return create_access_token(user, settings=self.settings)

    def resolve(self, token: str | None) -> Identity:
        """
        Raises:
            Unauthenticated: no token, invalid token, or user no longer exists
        """
        if not token:
            raise Unauthenticated("No token provided")

        payload = decode_access_token(token, settings=self.settings)
        user = self.users.get_user_by_id(payload.user_id)
        if user is None:
            logger.warning(
                "Auth failed: token for missing user",
                extra={"user_id": payload.user_id},
            )
            raise Unauthenticated("User not found")
        return Identity.of(user)
