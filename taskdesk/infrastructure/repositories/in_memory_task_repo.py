"""
Name: In-Memory Task Repository

Responsibilities:
  - Store tasks in process memory (tests, STORAGE_BACKEND=memory)
  - Filter by status and assignee
  - Keep ordering aligned with Postgres: created_at DESC, id DESC

Constraints:
  - Thread-safe: every access happens under a Lock
  - Returns copies so callers never alias stored records
  - Does not emulate ON DELETE SET NULL; a deleted assignee leaves a
    dangling assigned_to that readers resolve to None
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Iterable, List, Mapping, Optional

from ...domain.entities import Task, TaskStatus
from ...domain.repositories import TASK_UPDATABLE_FIELDS


class InMemoryTaskRepository:
    """R: Thread-safe in-memory task store."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._tasks: Dict[int, Task] = {}
        self._next_id = 1

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _newest_first(tasks: Iterable[Task]) -> List[Task]:
        return sorted(tasks, key=lambda t: (t.created_at, t.id), reverse=True)

    def get_task(self, task_id: int) -> Optional[Task]:
        with self._lock:
            task = self._tasks.get(task_id)
            return replace(task) if task else None

    def list_tasks(
        self,
        *,
        status: Optional[TaskStatus] = None,
        assigned_to: Optional[int] = None,
    ) -> List[Task]:
        with self._lock:
            values = [replace(t) for t in self._tasks.values()]

        def predicate(t: Task) -> bool:
            if status is not None and t.status != status:
                return False
            if assigned_to is not None and t.assigned_to != assigned_to:
                return False
            return True

        return self._newest_first(t for t in values if predicate(t))

    def list_tasks_assigned_to(self, user_id: int) -> List[Task]:
        return self.list_tasks(assigned_to=user_id)

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
        with self._lock:
            now = self._now()
            task = Task(
                id=self._next_id,
                title=title,
                status=TaskStatus(status),
                description=description,
                deadline=deadline,
                assigned_to=assigned_to,
                created_by=created_by,
                created_at=now,
                updated_at=now,
            )
            self._tasks[task.id] = task
            self._next_id += 1
            return replace(task)

    def update_task(
        self, task_id: int, changes: Mapping[str, object]
    ) -> Optional[Task]:
        unknown = set(changes) - TASK_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported task fields: {sorted(unknown)}")

        with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                return None
            updated = replace(current, **changes, updated_at=self._now())
            self._tasks[task_id] = updated
            return replace(updated)

    def delete_task(self, task_id: int) -> Optional[Task]:
        with self._lock:
            return self._tasks.pop(task_id, None)
