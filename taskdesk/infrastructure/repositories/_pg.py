"""
Name: Postgres query helpers

Responsibilities:
  - Run parameterized SQL on a pooled connection
  - Translate unique violations into Conflict, broken references into
    NotFound and anything else into DatabaseError
  - Log failures with structured context

Collaborators:
  - psycopg_pool.ConnectionPool
  - infrastructure.db.pool.get_pool (default pool)
"""

from __future__ import annotations

from typing import Iterable, Optional

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ...crosscutting.exceptions import Conflict, DatabaseError, NotFound
from ...crosscutting.logger import logger
from ..db.pool import get_pool


class PostgresRepositoryBase:
    """R: Shared pool access and error mapping for the Postgres repositories."""

    conflict_message = "Duplicate record"
    # R: Resource named when a foreign key points at a missing row
    referenced_resource = "Record"

    def __init__(self, pool: ConnectionPool | None = None) -> None:
        # R: Injectable pool for tests; the process pool otherwise
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        return self._pool or get_pool()

    def _execute(
        self,
        *,
        query: str,
        params: Iterable[object],
        log_msg: str,
        log_extra: dict[str, object],
        fetch: str,
        conflict_message: Optional[str] = None,
    ):
        try:
            with self._get_pool().connection() as conn:
                cursor = conn.execute(query, tuple(params))
                if fetch == "one":
                    return cursor.fetchone()
                return cursor.fetchall()
        except pg_errors.UniqueViolation as exc:
            logger.info(log_msg, extra={**log_extra, "error": "unique_violation"})
            raise Conflict(conflict_message or self.conflict_message) from exc
        except pg_errors.ForeignKeyViolation as exc:
            logger.info(log_msg, extra={**log_extra, "error": "foreign_key_violation"})
            raise NotFound(self.referenced_resource, None) from exc
        except Exception as exc:
            logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
            raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc

    def _fetchone(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        log_msg: str,
        log_extra: dict[str, object],
        conflict_message: Optional[str] = None,
    ) -> tuple | None:
        return self._execute(
            query=query,
            params=params,
            log_msg=log_msg,
            log_extra=log_extra,
            fetch="one",
            conflict_message=conflict_message,
        )

    def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        log_msg: str,
        log_extra: dict[str, object],
    ) -> list[tuple]:
        return self._execute(
            query=query,
            params=params,
            log_msg=log_msg,
            log_extra=log_extra,
            fetch="all",
        )

    def ping(self) -> bool:
        row = self._fetchone(
            query="SELECT 1",
            log_msg=f"{type(self).__name__}: ping failed",
            log_extra={},
        )
        return bool(row)
