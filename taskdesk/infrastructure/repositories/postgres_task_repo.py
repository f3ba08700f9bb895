"""
Name: PostgreSQL Task Repository

Responsibilities:
  - CRUD for the `tasks` table
  - Filtered listings (status, assignee), newest first

Collaborators:
  - repositories._pg.PostgresRepositoryBase
  - domain.entities.Task, TaskStatus

Constraints:
  - Parameterized SQL only
  - Ordering: created_at DESC, id DESC
"""

from __future__ import annotations

from typing import Mapping, Optional

from ...crosscutting.exceptions import DatabaseError
from ...domain.entities import Task, TaskStatus
from ...domain.repositories import TASK_UPDATABLE_FIELDS
from ._pg import PostgresRepositoryBase

_TASK_COLUMNS = (
    "id, title, description, deadline, status, assigned_to, created_by, "
    "created_at, updated_at"
)
_TASK_ORDER_BY = "created_at DESC, id DESC"


def _row_to_task(row: tuple) -> Task:
    try:
        status = TaskStatus(row[4])
    except ValueError as exc:
        raise DatabaseError(f"Invalid task status in database: {row[4]}") from exc

    return Task(
        id=row[0],
        title=row[1],
        description=row[2],
        deadline=row[3],
        status=status,
        assigned_to=row[5],
        created_by=row[6],
        created_at=row[7],
        updated_at=row[8],
    )


class PostgresTaskRepository(PostgresRepositoryBase):
    """R: TaskRepository backed by the `tasks` table."""

    referenced_resource = "User"

    def get_task(self, task_id: int) -> Optional[Task]:
        row = self._fetchone(
            query=f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id = %s",
            params=(task_id,),
            log_msg="PostgresTaskRepository: get_task failed",
            log_extra={"task_id": task_id},
        )
        return _row_to_task(row) if row else None

    def list_tasks(
        self,
        *,
        status: Optional[TaskStatus] = None,
        assigned_to: Optional[int] = None,
    ) -> list[Task]:
        conditions: list[str] = []
        params: list[object] = []
        if status is not None:
            conditions.append("status = %s")
            params.append(TaskStatus(status).value)
        if assigned_to is not None:
            conditions.append("assigned_to = %s")
            params.append(assigned_to)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        rows = self._fetchall(
            query=f"""
                SELECT {_TASK_COLUMNS}
                FROM tasks
                {where}
                ORDER BY {_TASK_ORDER_BY}
            """,
            params=params,
            log_msg="PostgresTaskRepository: list_tasks failed",
            log_extra={
                "status": status.value if status else None,
                "assigned_to": assigned_to,
            },
        )
        return [_row_to_task(r) for r in rows]

    def list_tasks_assigned_to(self, user_id: int) -> list[Task]:
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
        row = self._fetchone(
            query=f"""
                INSERT INTO tasks
                    (title, description, deadline, status, assigned_to, created_by)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {_TASK_COLUMNS}
            """,
            params=(
                title,
                description,
                deadline,
                TaskStatus(status).value,
                assigned_to,
                created_by,
            ),
            log_msg="PostgresTaskRepository: create_task failed",
            log_extra={"assigned_to": assigned_to, "created_by": created_by},
        )
        if not row:
            raise DatabaseError("PostgresTaskRepository: create_task returned no row")
        return _row_to_task(row)

    def update_task(
        self, task_id: int, changes: Mapping[str, object]
    ) -> Optional[Task]:
        unknown = set(changes) - TASK_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported task fields: {sorted(unknown)}")
        if not changes:
            return self.get_task(task_id)

        updates: list[str] = []
        params: list[object] = []
        for column in sorted(changes):
            value = changes[column]
            if isinstance(value, TaskStatus):
                value = value.value
            updates.append(f"{column} = %s")
            params.append(value)
        updates.append("updated_at = now()")
        params.append(task_id)

        row = self._fetchone(
            query=f"""
                UPDATE tasks
                SET {", ".join(updates)}
                WHERE id = %s
                RETURNING {_TASK_COLUMNS}
            """,
            params=params,
            log_msg="PostgresTaskRepository: update_task failed",
            log_extra={"task_id": task_id, "fields": sorted(changes)},
        )
        return _row_to_task(row) if row else None

    def delete_task(self, task_id: int) -> Optional[Task]:
        row = self._fetchone(
            query=f"DELETE FROM tasks WHERE id = %s RETURNING {_TASK_COLUMNS}",
            params=(task_id,),
            log_msg="PostgresTaskRepository: delete_task failed",
            log_extra={"task_id": task_id},
        )
        return _row_to_task(row) if row else None
