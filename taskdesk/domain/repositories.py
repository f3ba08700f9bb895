"""
Name: Domain Repository Interfaces

Responsibilities:
  - Define contracts for user and task persistence
  - Keep the engine and services independent from PostgreSQL

Collaborators:
  - domain.entities: User, Task
  - Implementations in infrastructure.repositories

Constraints:
  - Pure interfaces (Protocol), no implementation
  - Lookups return None when the row is absent (callers branch on it)
  - Uniqueness violations raise crosscutting.exceptions.Conflict

Notes:
  - Partial updates take a mapping of column name -> new value, so that
    "set to None" and "not supplied" stay distinguishable
"""

from typing import Mapping, Optional, Protocol

from .entities import Task, TaskStatus, User, UserRole

USER_UPDATABLE_FIELDS = frozenset({"name", "email", "password_hash", "role"})
TASK_UPDATABLE_FIELDS = frozenset(
    {"title", "description", "deadline", "status", "assigned_to"}
)


class UserRepository(Protocol):
    """
    R: Interface for the credential store.
    """

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        """R: Fetch a user by id, None if absent."""
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        """R: Fetch a user by exact (case-sensitive) email, None if absent."""
        ...

    def list_users(self) -> list[User]:
        """R: All users, oldest first."""
        ...

    def create_user(
        self, *, name: str, email: str, password_hash: str, role: UserRole
    ) -> User:
        """
        R: Insert a user.

        Raises:
            Conflict: email already present
        """
        ...

    def update_user(self, user_id: int, changes: Mapping[str, object]) -> Optional[User]:
        """
        R: Apply a partial update (keys from USER_UPDATABLE_FIELDS).

        Returns:
            Updated user, or None if it does not exist

        Raises:
            Conflict: new email belongs to a different user
        """
        ...

    def delete_user(self, user_id: int) -> Optional[User]:
        """R: Delete a user, returning the removed record (None if absent)."""
        ...

    def ping(self) -> bool:
        """R: Storage health check."""
        ...


class TaskRepository(Protocol):
    """
    R: Interface for task persistence.
    """

    def get_task(self, task_id: int) -> Optional[Task]:
        ...

    def list_tasks(
        self,
        *,
        status: Optional[TaskStatus] = None,
        assigned_to: Optional[int] = None,
    ) -> list[Task]:
        """R: Tasks matching the filters, newest first."""
        ...

    def list_tasks_assigned_to(self, user_id: int) -> list[Task]:
        """R: Tasks whose assignee is user_id, newest first."""
        ...

    def create_task(
        self,
        *,
        title: str,
        description: Optional[str],
        deadline,
        assigned_to: Optional[int],
        created_by: int,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> Task:
        ...

    def update_task(self, task_id: int, changes: Mapping[str, object]) -> Optional[Task]:
        """R: Apply a partial update (keys from TASK_UPDATABLE_FIELDS)."""
        ...

    def delete_task(self, task_id: int) -> Optional[Task]:
        """R: Delete a task, returning the removed record (None if absent)."""
        ...
