"""
Name: User Account Service

Responsibilities:
  - Register users and authenticate credentials
  - Admin roster management (list, read, create, update, delete)
  - Self profile read/update

Collaborators:
  - domain.repositories.UserRepository: credential store
  - domain.access_policy.AuthorizationPolicy: who may do what
  - identity.auth_users: password hashing

Constraints:
  - Passwords are hashed before reaching the repository
  - Email is compared exactly as stored (trimmed, case preserved)
  - An admin can never delete their own record

Notes:
  - Validation messages are shown to API clients verbatim
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from ..crosscutting.exceptions import (
    Conflict,
    DenyReason,
    Forbidden,
    NotFound,
    ValidationError,
)
from ..crosscutting.logger import logger
from ..domain.access_policy import Action, AuthorizationPolicy, Resource
from ..domain.entities import Identity, User, UserRole
from ..domain.repositories import UserRepository
from ..identity.auth_users import hash_password, verify_password

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

_ADMIN_EDITABLE_FIELDS = frozenset({"name", "email", "password", "role"})
_PROFILE_EDITABLE_FIELDS = frozenset({"name", "email", "password"})


def _validate_email(email: Any) -> str:
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("Invalid email format")
    return email.strip()


def _validate_password(password: Any) -> str:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    return password


def _validate_role(role: Any) -> UserRole:
    try:
        return UserRole(role)
    except ValueError as exc:
        raise ValidationError("Role must be either admin or user") from exc


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name cannot be empty")
    return name.strip()


class UserAccountService:
    """R: User registration, authentication and roster management."""

    def __init__(
        self,
        users: UserRepository,
        policy: AuthorizationPolicy,
        *,
        allow_admin_registration: bool = False,
    ):
        self.users = users
        self.policy = policy
        self.allow_admin_registration = allow_admin_registration

    # ------------------------------------------------------------------
    # Public (unauthenticated)
    # ------------------------------------------------------------------
    def register(
        self,
        *,
        name: str | None,
        email: str | None,
        password: str | None,
        role: str | UserRole = UserRole.USER,
    ) -> User:
        """
        R: Self-service registration.

        Raises:
            ValidationError: missing or malformed fields
            Forbidden: role=admin while admin registration is disabled
            Conflict: email already registered
        """
        user_role = self._validate_new_user(name, email, password, role)
        if user_role == UserRole.ADMIN and not self.allow_admin_registration:
            raise Forbidden(
                "Admin registration is disabled",
                reason=DenyReason.INSUFFICIENT_ROLE,
            )
        return self._create(name, email, password, user_role)

    def authenticate(self, email: str | None, password: str | None) -> User | None:
        """
        R: Return the user when the credentials match, else None.

        Unknown email and wrong password are indistinguishable to the caller.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.users.get_user_by_email(email.strip())
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login rejected", extra={"email": email.strip()})
            return None
        return user

    # ------------------------------------------------------------------
    # Self profile
    # ------------------------------------------------------------------
    def get_profile(self, actor: Identity) -> User:
        self.policy.enforce(actor, Action.READ_PROFILE, Resource.user(actor.id))
        return self._get_existing(actor.id)

    def update_profile(self, actor: Identity, changes: Mapping[str, Any]) -> User:
        """R: Update own name/email/password. Role changes are rejected."""
        self.policy.enforce(actor, Action.UPDATE_PROFILE, Resource.user(actor.id))
        if "role" in changes:
            raise ValidationError("Role cannot be changed from the profile")
        return self._update(actor.id, changes, _PROFILE_EDITABLE_FIELDS)

    # ------------------------------------------------------------------
    # Admin roster
    # ------------------------------------------------------------------
    def list_users(self, actor: Identity) -> list[User]:
        self.policy.enforce(actor, Action.LIST_USERS, Resource.none())
        return self.users.list_users()

    def get_user(self, actor: Identity, user_id: int) -> User:
        self.policy.enforce(actor, Action.READ_USER, Resource.user(user_id))
        return self._get_existing(user_id)

    def create_user(
        self,
        actor: Identity,
        *,
        name: str | None,
        email: str | None,
        password: str | None,
        role: str | UserRole = UserRole.USER,
    ) -> User:
        self.policy.enforce(actor, Action.CREATE_USER, Resource.none())
        user_role = self._validate_new_user(name, email, password, role)
        user = self._create(name, email, password, user_role)
        logger.info(
            "User created by admin",
            extra={"user_id": user.id, "actor_id": actor.id, "role": user.role.value},
        )
        return user

    def update_user(
        self, actor: Identity, user_id: int, changes: Mapping[str, Any]
    ) -> User:
        self.policy.enforce(actor, Action.UPDATE_USER, Resource.user(user_id))
        return self._update(user_id, changes, _ADMIN_EDITABLE_FIELDS)

    def delete_user(self, actor: Identity, user_id: int) -> User:
        """
        Raises:
            Forbidden(SELF_DELETE_BLOCKED): actor targets their own record
            NotFound: no such user
        """
        self.policy.enforce(actor, Action.DELETE_USER, Resource.user(user_id))
        deleted = self.users.delete_user(user_id)
        if deleted is None:
            raise NotFound("User", user_id)
        logger.info(
            "User deleted", extra={"user_id": user_id, "actor_id": actor.id}
        )
        return deleted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _get_existing(self, user_id: int) -> User:
        user = self.users.get_user_by_id(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    @staticmethod
    def _validate_new_user(
        name: Any, email: Any, password: Any, role: Any
    ) -> UserRole:
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")
        _validate_name(name)
        _validate_email(email)
        _validate_password(password)
        return _validate_role(role)

    def _create(self, name: Any, email: Any, password: Any, role: UserRole) -> User:
        normalized_email = email.strip()
        if self.users.get_user_by_email(normalized_email) is not None:
            raise Conflict("User with this email already exists")
        return self.users.create_user(
            name=name.strip(),
            email=normalized_email,
            password_hash=hash_password(password),
            role=role,
        )

    def _update(
        self,
        user_id: int,
        changes: Mapping[str, Any],
        allowed: frozenset[str],
    ) -> User:
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        updates: dict[str, object] = {}
        if "name" in changes:
            updates["name"] = _validate_name(changes["name"])
        if "email" in changes:
            updates["email"] = _validate_email(changes["email"])
        if "password" in changes:
            updates["password_hash"] = hash_password(
                _validate_password(changes["password"])
            )
        if "role" in changes:
            updates["role"] = _validate_role(changes["role"])

        current = self._get_existing(user_id)
        new_email = updates.get("email")
        if new_email is not None and new_email != current.email:
            other = self.users.get_user_by_email(new_email)
            if other is not None and other.id != user_id:
                raise Conflict("Email already taken by another user")

        updated = self.users.update_user(user_id, updates)
        if updated is None:
            raise NotFound("User", user_id)
        return updated
