"""Domain layer exports"""

from .access_policy import Action, AuthorizationPolicy, Decision, Resource, authorize
from .entities import Identity, Task, TaskStatus, User, UserRole
from .events import (
    LifecycleEvent,
    LifecycleEventSink,
    Recipient,
    TaskAssigned,
    TaskStatusChanged,
)
from .repositories import TaskRepository, UserRepository

__all__ = [
    "Action",
    "AuthorizationPolicy",
    "Decision",
    "Resource",
    "authorize",
    "Identity",
    "Task",
    "TaskStatus",
    "User",
    "UserRole",
    "LifecycleEvent",
    "LifecycleEventSink",
    "Recipient",
    "TaskAssigned",
    "TaskStatusChanged",
    "TaskRepository",
    "UserRepository",
]
