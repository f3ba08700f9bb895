"""
Name: HTTP DTOs

Responsibilities:
  - Request bodies and response envelopes for the REST surface
  - camelCase on the wire (assignedTo, createdAt), snake_case in Python
  - Map domain entities to DTOs without leaking password hashes

Notes:
  - Request fields are optional at the schema level so that the services
    produce the client-facing validation messages
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..application.task_lifecycle import TaskView
from ..domain.entities import TaskStatus, User, UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StrictCamelModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: str = UserRole.USER.value


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdateRequest(StrictCamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class CreateUserRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: str = UserRole.USER.value


class UpdateUserRequest(StrictCamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class CreateTaskRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[str] = None
    assigned_to: Union[int, str, None] = None


class UpdateTaskRequest(StrictCamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Union[int, str, None] = None


class StatusUpdateRequest(CamelModel):
    status: Optional[str] = None


def changes_of(req: BaseModel) -> dict:
    """R: Only the fields the client actually sent, keyed by snake_case name."""
    return req.model_dump(exclude_unset=True)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class UserOut(CamelModel):
    id: int
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AssigneeOut(CamelModel):
    id: int
    name: str
    email: str


class TaskOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    status: TaskStatus
    assigned_to: Optional[AssigneeOut] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    message: str
    user: UserOut
    token: str


class UserResponse(BaseModel):
    user: UserOut


class UserMessageResponse(BaseModel):
    message: str
    user: UserOut


class UsersResponse(BaseModel):
    users: list[UserOut]


class TaskResponse(BaseModel):
    task: TaskOut


class TaskMessageResponse(BaseModel):
    message: str
    task: TaskOut


class TasksResponse(BaseModel):
    tasks: list[TaskOut]


class HealthResponse(BaseModel):
    ok: bool
    db: str


# -----------------------------------------------------------------------------
# Mappers
# -----------------------------------------------------------------------------
def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def to_task_out(view: TaskView) -> TaskOut:
    task = view.task
    assignee = (
        AssigneeOut(id=view.assignee.id, name=view.assignee.name, email=view.assignee.email)
        if view.assignee is not None
        else None
    )
    return TaskOut(
        id=task.id,
        title=task.title,
        description=task.description,
        deadline=task.deadline,
        status=task.status,
        assigned_to=assignee,
        created_by=task.created_by,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )
