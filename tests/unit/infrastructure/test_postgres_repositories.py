"""
Name: Postgres Repository Tests (mocked pool)

Responsibilities:
  - Row mapping to domain entities
  - SQL parameters for filters and partial updates
  - Error mapping: unique violation -> Conflict, anything else -> DatabaseError
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from psycopg import errors as pg_errors

from taskdesk.crosscutting.exceptions import Conflict, DatabaseError, NotFound
from taskdesk.domain.entities import TaskStatus, UserRole
from taskdesk.infrastructure.repositories import (
    PostgresTaskRepository,
    PostgresUserRepository,
)

pytestmark = pytest.mark.unit

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _pool_with(conn):
    pool = MagicMock()
    pool.connection.return_value.__enter__.return_value = conn
    return pool


def _conn(fetchone=None, fetchall=None, side_effect=None):
    conn = MagicMock()
    if side_effect is not None:
        conn.execute.side_effect = side_effect
    else:
        cursor = MagicMock()
        cursor.fetchone.return_value = fetchone
        cursor.fetchall.return_value = fetchall or []
        conn.execute.return_value = cursor
    return conn


USER_ROW = (1, "Ann", "ann@example.com", "hash", "user", NOW, NOW)
TASK_ROW = (5, "Ship", None, None, "in_progress", 1, 2, NOW, NOW)


def test_get_user_maps_row():
    repo = PostgresUserRepository(pool=_pool_with(_conn(fetchone=USER_ROW)))

    user = repo.get_user_by_email("ann@example.com")

    assert user.id == 1
    assert user.role == UserRole.USER
    assert user.email == "ann@example.com"


def test_get_user_missing_returns_none():
    repo = PostgresUserRepository(pool=_pool_with(_conn(fetchone=None)))

    assert repo.get_user_by_id(1) is None


def test_invalid_role_in_database_raises():
    bad_row = USER_ROW[:4] + ("owner",) + USER_ROW[5:]
    repo = PostgresUserRepository(pool=_pool_with(_conn(fetchone=bad_row)))

    with pytest.raises(DatabaseError):
        repo.get_user_by_id(1)


def test_create_user_unique_violation_maps_to_conflict():
    conn = _conn(side_effect=pg_errors.UniqueViolation("duplicate key"))
    repo = PostgresUserRepository(pool=_pool_with(conn))

    with pytest.raises(Conflict, match="User with this email already exists"):
        repo.create_user(
            name="Ann", email="ann@example.com", password_hash="h", role=UserRole.USER
        )


def test_update_user_unique_violation_maps_to_email_taken():
    conn = _conn(side_effect=pg_errors.UniqueViolation("duplicate key"))
    repo = PostgresUserRepository(pool=_pool_with(conn))

    with pytest.raises(Conflict, match="Email already taken by another user"):
        repo.update_user(1, {"email": "bob@example.com"})


def test_other_errors_map_to_database_error():
    conn = _conn(side_effect=RuntimeError("connection reset"))
    repo = PostgresUserRepository(pool=_pool_with(conn))

    with pytest.raises(DatabaseError):
        repo.list_users()


def test_update_user_builds_whitelisted_set_clause():
    conn = _conn(fetchone=USER_ROW)
    repo = PostgresUserRepository(pool=_pool_with(conn))

    repo.update_user(1, {"role": UserRole.ADMIN, "name": "Ann"})

    query, params = conn.execute.call_args[0]
    assert "name = %s" in query
    assert "role = %s" in query
    assert "updated_at = now()" in query
    assert params == ("Ann", "admin", 1)


def test_list_tasks_with_filters():
    conn = _conn(fetchall=[TASK_ROW])
    repo = PostgresTaskRepository(pool=_pool_with(conn))

    tasks = repo.list_tasks(status=TaskStatus.IN_PROGRESS, assigned_to=1)

    query, params = conn.execute.call_args[0]
    assert "status = %s AND assigned_to = %s" in query
    assert "ORDER BY created_at DESC, id DESC" in query
    assert params == ("in_progress", 1)
    assert tasks[0].status == TaskStatus.IN_PROGRESS
    assert tasks[0].assigned_to == 1
    assert tasks[0].created_by == 2


def test_list_tasks_without_filters_has_no_where():
    conn = _conn(fetchall=[])
    repo = PostgresTaskRepository(pool=_pool_with(conn))

    assert repo.list_tasks() == []
    query, params = conn.execute.call_args[0]
    assert "WHERE" not in query
    assert params == ()


def test_update_task_status_param_uses_value():
    conn = _conn(fetchone=TASK_ROW)
    repo = PostgresTaskRepository(pool=_pool_with(conn))

    repo.update_task(5, {"status": TaskStatus.COMPLETED})

    _, params = conn.execute.call_args[0]
    assert params == ("completed", 5)


def test_delete_task_missing_returns_none():
    repo = PostgresTaskRepository(pool=_pool_with(_conn(fetchone=None)))

    assert repo.delete_task(5) is None


def test_ping():
    repo = PostgresTaskRepository(pool=_pool_with(_conn(fetchone=(1,))))

    assert repo.ping() is True


def test_create_task_with_vanished_assignee_maps_to_not_found():
    conn = _conn(side_effect=pg_errors.ForeignKeyViolation("tasks_assigned_to_fkey"))
    repo = PostgresTaskRepository(pool=_pool_with(conn))

    with pytest.raises(NotFound, match="User not found"):
        repo.create_task(
            title="Ship", description=None, deadline=None, assigned_to=7, created_by=1
        )


def test_update_task_with_vanished_assignee_maps_to_not_found():
    conn = _conn(side_effect=pg_errors.ForeignKeyViolation("tasks_assigned_to_fkey"))
    repo = PostgresTaskRepository(pool=_pool_with(conn))

    with pytest.raises(NotFound, match="User not found"):
        repo.update_task(5, {"assigned_to": 7})
