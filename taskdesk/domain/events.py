"""
Name: Task Lifecycle Events

Responsibilities:
  - Describe what happened to a task (assignment, status change)
  - Define the channel contract the lifecycle engine publishes to

Collaborators:
  - application.task_lifecycle.TaskLifecycleEngine: producer
  - infrastructure.notifications: channel and email dispatcher (consumers)

Notes:
  - Events are fire-and-forget, at most once; no retry queue
  - Recipients are resolved at publish time so consumers never hit storage
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Union

from .entities import TaskStatus


@dataclass(frozen=True)
class Recipient:
    """R: Addressee of a notification."""

    user_id: int
    email: str
    name: str


@dataclass(frozen=True)
class TaskAssigned:
    """R: A task was created with an assignee."""

    task_id: int
    assignee: Recipient
    title: str
    description: Optional[str] = None
    deadline: Optional[datetime] = None


@dataclass(frozen=True)
class TaskStatusChanged:
    """R: A task's status changed to a different value."""

    task_id: int
    assignee: Recipient
    title: str
    new_status: TaskStatus
    updated_by_name: str


LifecycleEvent = Union[TaskAssigned, TaskStatusChanged]


class LifecycleEventSink(Protocol):
    """R: Anything that accepts lifecycle events (channel, test recorder)."""

    def publish(self, event: LifecycleEvent) -> None:
        ...
