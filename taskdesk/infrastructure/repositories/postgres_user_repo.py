"""
Name: PostgreSQL User Repository

Responsibilities:
  - Load users by id / email for authentication
  - Create, update, delete and list users
  - Map rows to the domain User and validate UserRole

Collaborators:
  - repositories._pg.PostgresRepositoryBase: pool access, error mapping
  - domain.entities.User, UserRole

Constraints:
  - Returns None when the row is absent
  - Parameterized SQL only; column names in SET come from a fixed whitelist
  - Ordering: created_at ASC, id ASC
"""

from __future__ import annotations

from typing import Mapping, Optional

from ...crosscutting.exceptions import DatabaseError
from ...domain.entities import User, UserRole
from ...domain.repositories import USER_UPDATABLE_FIELDS
from ._pg import PostgresRepositoryBase

_USER_COLUMNS = "id, name, email, password_hash, role, created_at, updated_at"
_USER_ORDER_BY = "created_at ASC, id ASC"


def _row_to_user(row: tuple) -> User:
    try:
        role = UserRole(row[4])
    except ValueError as exc:
        raise DatabaseError(f"Invalid user role in database: {row[4]}") from exc

    return User(
        id=row[0],
        name=row[1],
        email=row[2],
        password_hash=row[3],
        role=role,
        created_at=row[5],
        updated_at=row[6],
    )


class PostgresUserRepository(PostgresRepositoryBase):
    """R: UserRepository backed by the `users` table."""

    conflict_message = "User with this email already exists"

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            params=(user_id,),
            log_msg="PostgresUserRepository: get_user_by_id failed",
            log_extra={"user_id": user_id},
        )
        return _row_to_user(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        row = self._fetchone(
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s",
            params=(email,),
            log_msg="PostgresUserRepository: get_user_by_email failed",
            log_extra={"email": email},
        )
        return _row_to_user(row) if row else None

    def list_users(self) -> list[User]:
        rows = self._fetchall(
            query=f"SELECT {_USER_COLUMNS} FROM users ORDER BY {_USER_ORDER_BY}",
            log_msg="PostgresUserRepository: list_users failed",
            log_extra={},
        )
        return [_row_to_user(r) for r in rows]

    def create_user(
        self, *, name: str, email: str, password_hash: str, role: UserRole
    ) -> User:
        row = self._fetchone(
            query=f"""
                INSERT INTO users (name, email, password_hash, role)
                VALUES (%s, %s, %s, %s)
                RETURNING {_USER_COLUMNS}
            """,
            params=(name, email, password_hash, UserRole(role).value),
            log_msg="PostgresUserRepository: create_user failed",
            log_extra={"email": email, "role": UserRole(role).value},
        )
        if not row:
            raise DatabaseError("PostgresUserRepository: create_user returned no row")
        return _row_to_user(row)

    def update_user(
        self, user_id: int, changes: Mapping[str, object]
    ) -> Optional[User]:
        unknown = set(changes) - USER_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported user fields: {sorted(unknown)}")
        if not changes:
            return self.get_user_by_id(user_id)

        updates: list[str] = []
        params: list[object] = []
        for column in sorted(changes):
            value = changes[column]
            if isinstance(value, UserRole):
                value = value.value
            updates.append(f"{column} = %s")
            params.append(value)
        updates.append("updated_at = now()")
        params.append(user_id)

        row = self._fetchone(
            query=f"""
                UPDATE users
                SET {", ".join(updates)}
                WHERE id = %s
                RETURNING {_USER_COLUMNS}
            """,
            params=params,
            log_msg="PostgresUserRepository: update_user failed",
            log_extra={"user_id": user_id, "fields": sorted(changes)},
            conflict_message="Email already taken by another user",
        )
        return _row_to_user(row) if row else None

    def delete_user(self, user_id: int) -> Optional[User]:
        row = self._fetchone(
            query=f"DELETE FROM users WHERE id = %s RETURNING {_USER_COLUMNS}",
            params=(user_id,),
            log_msg="PostgresUserRepository: delete_user failed",
            log_extra={"user_id": user_id},
        )
        return _row_to_user(row) if row else None
