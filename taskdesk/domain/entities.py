"""
Name: Domain Entities

Responsibilities:
  - Define core entities (User, Task) and their enumerated values
  - Define the resolved Identity used for every authorization decision

Collaborators:
  - None (pure domain layer, no external dependencies)

Constraints:
  - No dependencies on infrastructure or frameworks
  - Role and status are always members of their enums

Notes:
  - User.password_hash never leaves the backend (API DTOs omit it)
  - Task status transitions are unordered (any state to any state)
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    """R: Supported user roles."""

    ADMIN = "admin"
    USER = "user"


class TaskStatus(str, Enum):
    """R: Task lifecycle states. Initial state is PENDING; none is terminal."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class User:
    """
    R: Registered user (credential store record).

    Attributes:
        id: Numeric identifier, immutable after creation
        name: Display name
        email: Unique email, compared case-sensitively as stored
        password_hash: Argon2 hash (never exposed outward)
        role: admin or user
    """

    id: int
    name: str
    email: str
    password_hash: str
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass
class Task:
    """
    R: Unit of work assigned to a user.

    Attributes:
        id: Numeric identifier
        title: Required, non-empty
        description: Optional free text
        deadline: Optional timestamp
        status: One of TaskStatus
        assigned_to: Assignee user id (nullable)
        created_by: Creator user id, set once at creation
    """

    id: int
    title: str
    status: TaskStatus = TaskStatus.PENDING
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    assigned_to: Optional[int] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Identity:
    """R: Resolved identity behind a verified credential."""

    id: int
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def of(cls, user: User) -> "Identity":
        return cls(id=user.id, email=user.email, role=user.role)
