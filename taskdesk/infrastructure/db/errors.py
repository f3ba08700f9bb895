"""
Name: Database Pool Errors

Responsibilities:
  - Typed errors for pool lifecycle misuse instead of bare RuntimeError
"""


class DatabasePoolError(Exception):
    """Base class for database pool errors."""


class PoolAlreadyInitializedError(DatabasePoolError):
    """init_pool() was called twice in the same process."""


class PoolNotInitializedError(DatabasePoolError):
    """The pool was used before init_pool()."""
