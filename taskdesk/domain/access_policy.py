"""
Name: Authorization Policy

Responsibilities:
  - Decide allow/deny for (identity, action, resource)
  - Report a distinguishable deny reason for every denial

Collaborators:
  - domain.entities: Identity, Task, UserRole
  - crosscutting.exceptions: DenyReason, Forbidden (raised by enforce)

Notes:
  - authorize() is pure and total: every action has a rule, same inputs give
    the same decision, nothing is read or written
  - Nobody can delete their own user record, admins included
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..crosscutting.exceptions import DenyReason, Forbidden
from .entities import Identity, Task


class Action(str, Enum):
    """R: Every action the API exposes to an authenticated caller."""

    # Admin-scoped user roster
    LIST_USERS = "users:list"
    READ_USER = "users:read"
    CREATE_USER = "users:create"
    UPDATE_USER = "users:update"
    DELETE_USER = "users:delete"

    # Admin-scoped task roster
    LIST_TASKS = "tasks:list"
    READ_TASK = "tasks:read"
    CREATE_TASK = "tasks:create"
    UPDATE_TASK = "tasks:update"
    DELETE_TASK = "tasks:delete"

    # Self-scoped
    READ_PROFILE = "profile:read"
    UPDATE_PROFILE = "profile:update"
    READ_OWN_TASKS = "tasks:read_own"

    # Admin or assignee
    UPDATE_TASK_STATUS = "tasks:update_status"


ADMIN_ACTIONS = frozenset(
    {
        Action.LIST_USERS,
        Action.READ_USER,
        Action.CREATE_USER,
        Action.UPDATE_USER,
        Action.DELETE_USER,
        Action.LIST_TASKS,
        Action.READ_TASK,
        Action.CREATE_TASK,
        Action.UPDATE_TASK,
        Action.DELETE_TASK,
    }
)

_SELF_ACTIONS = frozenset(
    {Action.READ_PROFILE, Action.UPDATE_PROFILE, Action.READ_OWN_TASKS}
)

_DENY_MESSAGES = {
    DenyReason.INSUFFICIENT_ROLE: "Admin access required",
    DenyReason.SELF_DELETE_BLOCKED: "Cannot delete your own account",
}

_NOT_OWNER_MESSAGES = {
    Action.UPDATE_TASK_STATUS: "You can only update status of tasks assigned to you",
    Action.READ_OWN_TASKS: "You can only read your own tasks",
}


@dataclass(frozen=True)
class Resource:
    """
    R: What the action targets.

    user_id: target user (profile, user roster, own-task listing)
    assignee_id: the task's assigned_to at decision time
    """

    user_id: int | None = None
    assignee_id: int | None = None

    @classmethod
    def none(cls) -> "Resource":
        return cls()

    @classmethod
    def user(cls, user_id: int) -> "Resource":
        return cls(user_id=user_id)

    @classmethod
    def task(cls, task: Task) -> "Resource":
        return cls(assignee_id=task.assigned_to)


@dataclass(frozen=True)
class Decision:
    """R: Outcome of an authorization check."""

    allowed: bool
    reason: DenyReason | None = None

    def __post_init__(self) -> None:
        if self.allowed == (self.reason is not None):
            raise ValueError("A denial needs a reason and an allow must not carry one")

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)


def authorize(identity: Identity, action: Action, resource: Resource) -> Decision:
    """R: Evaluate the policy rules in order; the first matching rule decides."""
    if action == Action.DELETE_USER:
        if not identity.is_admin:
            return Decision.deny(DenyReason.INSUFFICIENT_ROLE)
        if resource.user_id == identity.id:
            return Decision.deny(DenyReason.SELF_DELETE_BLOCKED)
        return Decision.allow()

    if action in ADMIN_ACTIONS:
        if identity.is_admin:
            return Decision.allow()
        return Decision.deny(DenyReason.INSUFFICIENT_ROLE)

    if action in _SELF_ACTIONS:
        if resource.user_id == identity.id:
            return Decision.allow()
        return Decision.deny(DenyReason.NOT_OWNER)

    if action == Action.UPDATE_TASK_STATUS:
        if identity.is_admin:
            return Decision.allow()
        if resource.assignee_id is not None and resource.assignee_id == identity.id:
            return Decision.allow()
        return Decision.deny(DenyReason.NOT_OWNER)

    # R: Unknown actions are denied
    return Decision.deny(DenyReason.INSUFFICIENT_ROLE)


def deny_message(action: Action, reason: DenyReason) -> str:
    """R: Human-readable message for a denial."""
    if reason == DenyReason.NOT_OWNER:
        return _NOT_OWNER_MESSAGES.get(action, "You can only access your own profile")
    return _DENY_MESSAGES[reason]


def enforce(identity: Identity, action: Action, resource: Resource) -> None:
    """
    R: authorize() that raises on denial.

    Raises:
        Forbidden: carrying the deny reason
    """
    decision = authorize(identity, action, resource)
    if not decision.allowed:
        raise Forbidden(deny_message(action, decision.reason), reason=decision.reason)


class AuthorizationPolicy:
    """
    R: Injectable wrapper over the module-level rules.

    Passed to the lifecycle engine and the account service at construction.
    """

    def authorize(
        self, identity: Identity, action: Action, resource: Resource
    ) -> Decision:
        return authorize(identity, action, resource)

    def enforce(self, identity: Identity, action: Action, resource: Resource) -> None:
        enforce(identity, action, resource)
