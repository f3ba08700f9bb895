"""
Name: In-Memory User Repository

Responsibilities:
  - Store users in process memory (tests, STORAGE_BACKEND=memory)
  - Enforce email uniqueness like the users table does
  - Keep ordering aligned with Postgres: created_at ASC, id ASC

Collaborators:
  - domain.entities.User, UserRole
  - domain.repositories.UserRepository (contract)

Constraints:
  - Thread-safe: every access happens under a Lock
  - Returns copies so callers never alias stored records
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Mapping, Optional

from ...crosscutting.exceptions import Conflict
from ...domain.entities import User, UserRole
from ...domain.repositories import USER_UPDATABLE_FIELDS


class InMemoryUserRepository:
    """R: Thread-safe in-memory credential store."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[int, User] = {}
        self._next_id = 1

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _email_taken(self, email: str, *, exclude_id: int | None = None) -> bool:
        return any(
            u.email == email and u.id != exclude_id for u in self._users.values()
        )

    # =========================================================
    # Reads
    # =========================================================
    def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return replace(user)
        return None

    def list_users(self) -> List[User]:
        with self._lock:
            users = [replace(u) for u in self._users.values()]
        return sorted(users, key=lambda u: (u.created_at, u.id))

    # =========================================================
    # Writes
    # =========================================================
    def create_user(
        self, *, name: str, email: str, password_hash: str, role: UserRole
    ) -> User:
        with self._lock:
            if self._email_taken(email):
                raise Conflict("User with this email already exists")
            now = self._now()
            user = User(
                id=self._next_id,
                name=name,
                email=email,
                password_hash=password_hash,
                role=UserRole(role),
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            self._next_id += 1
            return replace(user)

    def update_user(
        self, user_id: int, changes: Mapping[str, object]
    ) -> Optional[User]:
        unknown = set(changes) - USER_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported user fields: {sorted(unknown)}")

        with self._lock:
            current = self._users.get(user_id)
            if current is None:
                return None
            new_email = changes.get("email")
            if new_email is not None and self._email_taken(
                str(new_email), exclude_id=user_id
            ):
                raise Conflict("Email already taken by another user")
            updated = replace(current, **changes, updated_at=self._now())
            self._users[user_id] = updated
            return replace(updated)

    def delete_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            removed = self._users.pop(user_id, None)
        return removed

    def ping(self) -> bool:
        return True
