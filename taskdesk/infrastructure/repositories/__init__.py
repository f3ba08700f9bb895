"""Infrastructure repositories (Postgres and in-memory)"""

from .in_memory_task_repo import InMemoryTaskRepository
from .in_memory_user_repo import InMemoryUserRepository
from .postgres_task_repo import PostgresTaskRepository
from .postgres_user_repo import PostgresUserRepository

__all__ = [
    # Postgres
    "PostgresUserRepository",
    "PostgresTaskRepository",
    # In-memory
    "InMemoryUserRepository",
    "InMemoryTaskRepository",
]
