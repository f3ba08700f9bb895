"""
Name: Task Lifecycle Engine

Responsibilities:
  - Create, update, re-status and delete tasks on behalf of an actor
  - Validate inputs (title, deadline, status, assignee) before any write
  - Consult the AuthorizationPolicy for every operation
  - Publish lifecycle events (assignment, status change) after commit

Collaborators:
  - domain.repositories: TaskRepository, UserRepository
  - domain.access_policy.AuthorizationPolicy
  - domain.events.LifecycleEventSink: notification channel

Constraints:
  - Status transitions are unordered: any status may move to any other
  - A failed validation or missing assignee writes nothing
  - Event publication never fails the operation that triggered it

Notes:
  - Status-change events go to the assignee the task had before the update
  - Same-status updates publish nothing
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Mapping, Optional

from ..crosscutting.exceptions import NotFound, ValidationError
from ..crosscutting.logger import logger
from ..domain.access_policy import Action, AuthorizationPolicy, Resource
from ..domain.entities import Identity, Task, TaskStatus, User
from ..domain.events import (
    LifecycleEvent,
    LifecycleEventSink,
    Recipient,
    TaskAssigned,
    TaskStatusChanged,
)
from ..domain.repositories import TASK_UPDATABLE_FIELDS, TaskRepository, UserRepository

SYSTEM_ACTOR_NAME = "System"

_STATUS_MESSAGE = "Status must be one of: " + ", ".join(s.value for s in TaskStatus)


@dataclass(frozen=True)
class TaskView:
    """R: A task together with its resolved assignee (None when unassigned)."""

    task: Task
    assignee: Optional[User] = None


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------
def parse_status(value: Any) -> TaskStatus:
    """
    Raises:
        ValidationError: value is not one of the three task states
    """
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError as exc:
        raise ValidationError(_STATUS_MESSAGE) from exc


def parse_deadline(value: Any) -> Optional[datetime]:
    """
    R: Accept an ISO-8601 date or datetime (string or object).

    Naive values are taken as UTC. Empty input clears the deadline.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError("Invalid deadline format") from exc
    else:
        raise ValidationError("Invalid deadline format")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_assignee_id(value: Any) -> Optional[int]:
    """R: Coerce an assignee reference to an int id. Empty means unassigned."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("Invalid assignedTo user ID")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ValidationError("Invalid assignedTo user ID") from exc
    raise ValidationError("Invalid assignedTo user ID")


def _parse_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Title is required")
    return value.strip()


def _parse_description(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Description must be a string")
    return value


class TaskLifecycleEngine:
    """
    R: Owns task state transitions and their side effects.

    Every public operation takes the acting Identity and authorizes it
    before reading or writing anything the actor is not entitled to.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        events: LifecycleEventSink,
        policy: AuthorizationPolicy,
    ):
        self.tasks = tasks
        self.users = users
        self.events = events
        self.policy = policy

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_task(self, task_id: int, actor: Identity) -> TaskView:
        self.policy.enforce(actor, Action.READ_TASK, Resource.none())
        return self._view(self._get_existing(task_id))

    def list_tasks(
        self,
        actor: Identity,
        *,
        status: Any = None,
        assigned_to: Any = None,
    ) -> list[TaskView]:
        """R: Admin listing, newest first, optionally filtered."""
        self.policy.enforce(actor, Action.LIST_TASKS, Resource.none())
        status_filter = parse_status(status) if status else None
        assignee_filter = parse_assignee_id(assigned_to)
        tasks = self.tasks.list_tasks(status=status_filter, assigned_to=assignee_filter)
        return self._views(tasks)

    def list_assigned_tasks(self, actor: Identity) -> list[TaskView]:
        """R: Tasks assigned to the actor, newest first."""
        self.policy.enforce(actor, Action.READ_OWN_TASKS, Resource.user(actor.id))
        return self._views(self.tasks.list_tasks_assigned_to(actor.id))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_task(self, fields: Mapping[str, Any], actor: Identity) -> TaskView:
        """
        R: Create a pending task, optionally assigned.

        Raises:
            Forbidden: actor is not an admin
            ValidationError: bad title, deadline or assignee reference
            NotFound: assignee does not exist (nothing is written)
        """
        self.policy.enforce(actor, Action.CREATE_TASK, Resource.none())

        title = _parse_title(fields.get("title"))
        description = _parse_description(fields.get("description"))
        deadline = parse_deadline(fields.get("deadline"))
        assignee_id = parse_assignee_id(fields.get("assigned_to"))
        assignee = self._resolve_assignee(assignee_id)

        task = self.tasks.create_task(
            title=title,
            description=description,
            deadline=deadline,
            assigned_to=assignee_id,
            created_by=actor.id,
            status=TaskStatus.PENDING,
        )
        logger.info(
            "Task created",
            extra={"task_id": task.id, "actor_id": actor.id, "assigned_to": assignee_id},
        )

        if assignee is not None:
            self._publish(
                TaskAssigned(
                    task_id=task.id,
                    assignee=_recipient(assignee),
                    title=task.title,
                    description=task.description,
                    deadline=task.deadline,
                )
            )
        return TaskView(task=task, assignee=assignee)

    def update_task(
        self, task_id: int, changes: Mapping[str, Any], actor: Identity
    ) -> TaskView:
        """
        R: Admin partial update of any task field.

        Raises:
            Forbidden: actor is not an admin
            ValidationError: unknown field or invalid value
            NotFound: task or new assignee does not exist
        """
        self.policy.enforce(actor, Action.UPDATE_TASK, Resource.none())

        unknown = set(changes) - TASK_UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        updates: dict[str, object] = {}
        if "title" in changes:
            updates["title"] = _parse_title(changes["title"])
        if "description" in changes:
            updates["description"] = _parse_description(changes["description"])
        if "deadline" in changes:
            updates["deadline"] = parse_deadline(changes["deadline"])
        if "status" in changes:
            updates["status"] = parse_status(changes["status"])
        if "assigned_to" in changes:
            updates["assigned_to"] = parse_assignee_id(changes["assigned_to"])

        existing = self._get_existing(task_id)
        if "assigned_to" in updates:
            self._resolve_assignee(updates["assigned_to"])
        return self._apply(existing, updates, actor)

    def update_task_status(
        self, task_id: int, status: Any, actor: Identity
    ) -> TaskView:
        """
        R: Status-only transition, open to admins and the task's assignee.

        Raises:
            ValidationError: status is not a valid task state
            NotFound: task does not exist
            Forbidden(NOT_OWNER): actor is neither admin nor assignee
        """
        new_status = parse_status(status)
        existing = self._get_existing(task_id)
        self.policy.enforce(actor, Action.UPDATE_TASK_STATUS, Resource.task(existing))
        return self._apply(existing, {"status": new_status}, actor)

    def delete_task(self, task_id: int, actor: Identity) -> TaskView:
        self.policy.enforce(actor, Action.DELETE_TASK, Resource.none())
        deleted = self.tasks.delete_task(task_id)
        if deleted is None:
            raise NotFound("Task", task_id)
        logger.info("Task deleted", extra={"task_id": task_id, "actor_id": actor.id})
        return self._view(deleted)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _apply(
        self, existing: Task, updates: Mapping[str, object], actor: Identity
    ) -> TaskView:
        previous_status = existing.status
        previous_assignee_id = existing.assigned_to

        updated = self.tasks.update_task(existing.id, updates)
        if updated is None:
            # R: Deleted between read and write
            raise NotFound("Task", existing.id)

        new_status = updates.get("status")
        if new_status is not None and new_status != previous_status:
            logger.info(
                "Task status changed",
                extra={
                    "task_id": existing.id,
                    "from_status": previous_status.value,
                    "to_status": updated.status.value,
                    "actor_id": actor.id,
                },
            )
            self._notify_status_change(existing, previous_assignee_id, updated, actor)

        return self._view(updated)

    def _notify_status_change(
        self,
        existing: Task,
        previous_assignee_id: Optional[int],
        updated: Task,
        actor: Identity,
    ) -> None:
        if previous_assignee_id is None:
            return
        assignee = self.users.get_user_by_id(previous_assignee_id)
        if assignee is None:
            return
        actor_user = self.users.get_user_by_id(actor.id)
        self._publish(
            TaskStatusChanged(
                task_id=existing.id,
                assignee=_recipient(assignee),
                title=existing.title,
                new_status=updated.status,
                updated_by_name=actor_user.name if actor_user else SYSTEM_ACTOR_NAME,
            )
        )

    def _publish(self, event: LifecycleEvent) -> None:
        try:
            self.events.publish(event)
        except Exception as exc:
            logger.error(
                "Lifecycle event publish failed",
                exc_info=True,
                extra={
                    "event_type": type(event).__name__,
                    "task_id": event.task_id,
                    "error": str(exc),
                },
            )

    def _get_existing(self, task_id: int) -> Task:
        task = self.tasks.get_task(task_id)
        if task is None:
            raise NotFound("Task", task_id)
        return task

    def _resolve_assignee(self, assignee_id: Optional[int]) -> Optional[User]:
        if assignee_id is None:
            return None
        user = self.users.get_user_by_id(assignee_id)
        if user is None:
            raise NotFound("User", assignee_id)
        return user

    def _view(self, task: Task) -> TaskView:
        assignee = (
            self.users.get_user_by_id(task.assigned_to)
            if task.assigned_to is not None
            else None
        )
        return TaskView(task=task, assignee=assignee)

    def _views(self, tasks: list[Task]) -> list[TaskView]:
        cache: dict[int, Optional[User]] = {}
        views = []
        for task in tasks:
            assignee = None
            if task.assigned_to is not None:
                if task.assigned_to not in cache:
                    cache[task.assigned_to] = self.users.get_user_by_id(task.assigned_to)
                assignee = cache[task.assigned_to]
            views.append(TaskView(task=task, assignee=assignee))
        return views


def _recipient(user: User) -> Recipient:
    return Recipient(user_id=user.id, email=user.email, name=user.name)
