"""
Name: Task Routes

Responsibilities:
  - Admin task roster (list with filters, read, create, update, delete)
  - Caller's own tasks and the status-only update path

Collaborators:
  - application.task_lifecycle.TaskLifecycleEngine
  - api.dependencies.require_identity

Notes:
  - /my-tasks and /{task_id}/status are declared before /{task_id}
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..application.task_lifecycle import TaskLifecycleEngine
from ..container import get_task_lifecycle_engine
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..domain.entities import Identity
from .dependencies import require_identity
from .schemas import (
    CreateTaskRequest,
    StatusUpdateRequest,
    TaskMessageResponse,
    TaskResponse,
    TasksResponse,
    UpdateTaskRequest,
    changes_of,
    to_task_out,
)

router = APIRouter(prefix="/tasks", tags=["tasks"], responses=OPENAPI_ERROR_RESPONSES)


@router.get("/my-tasks", response_model=TasksResponse)
def my_tasks(
    identity: Identity = Depends(require_identity),
    engine: TaskLifecycleEngine = Depends(get_task_lifecycle_engine),
):
    return TasksResponse(
        tasks=[to_task_out(v) for v in engine.list_assigned_tasks(identity)]
    )


@router.put("/{task_id}/status", response_model=TaskMessageResponse)
def update_task_status(
    task_id: int,
    req: StatusUpdateRequest,
    identity: Identity = Depends(require_identity),
    engine: TaskLifecycleEngine = Depends(get_task_lifecycle_engine),
):
    view = engine.update_task_status(task_id, req.status, identity)
    return TaskMessageResponse(
        message="Task status updated successfully", task=to_task_out(view)
    )


@router.get("", response_model=TasksResponse)
def list_tasks(
    status: Optional[str] = Query(default=None),
    assigned_to: Optional[str] = Query(default=None, alias="assignedTo"),
    identity: Identity = Depends(require_identity),
    engine: TaskLifecycleEngine = Depends(get_task_lifecycle_engine),
):
    views = engine.list_tasks(identity, status=status, assigned_to=assigned_to)
    return TasksResponse(tasks=[to_task_out(v) for v in views])


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    identity: Identity = Depends(require_identity),
    engine: TaskLifecycleEngine = Depends(get_task_lifecycle_engine),
):
    return TaskResponse(task=to_task_out(engine.get_task(task_id, identity)))


@router.post("", response_model=TaskMessageResponse, status_code=201)
def create_task(
    req: CreateTaskRequest,
    identity: Identity = Depends(require_identity),
    engine: TaskLifecycleEngine = Depends(get_task_lifecycle_engine),
):
    view = engine.create_task(changes_of(req), identity)
    return TaskMessageResponse(
        message="Task created successfully", task=to_task_out(view)
    )


@router.put("/{task_id}", response_model=TaskMessageResponse)
def update_task(
    task_id: int,
    req: UpdateTaskRequest,
    identity: Identity = Depends(require_identity),
    engine: TaskLifecycleEngine = Depends(get_task_lifecycle_engine),
):
    view = engine.update_task(task_id, changes_of(req), identity)
    return TaskMessageResponse(
        message="Task updated successfully", task=to_task_out(view)
    )


@router.delete("/{task_id}", response_model=TaskMessageResponse)
def delete_task(
    task_id: int,
    identity: Identity = Depends(require_identity),
    engine: TaskLifecycleEngine = Depends(get_task_lifecycle_engine),
):
    view = engine.delete_task(task_id, identity)
    return TaskMessageResponse(
        message="Task deleted successfully", task=to_task_out(view)
    )
