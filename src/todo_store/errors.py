"""Error hierarchy for the todo store.

- TodoStoreError: base class carrying a human readable message and a code
- ValidationError: bad input to insert/update or a rejected query
- NotFoundError: update/delete/get referencing an unknown id
- NotInitializedError: reads against a store that was never initialized
"""

from __future__ import annotations

from typing import Optional


class TodoStoreError(Exception):
    """Base class for all todo store errors."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# PUBLIC_INTERFACE
class ValidationError(TodoStoreError):
    """Input validation failed. `field` names the offending input, if any."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


# PUBLIC_INTERFACE
class NotFoundError(TodoStoreError):
    """No record has the requested id."""

    def __init__(self, todo_id: str) -> None:
        super().__init__(f"Todo not found: {todo_id!r}", code="NOT_FOUND")
        self.todo_id = todo_id


# PUBLIC_INTERFACE
class NotInitializedError(TodoStoreError):
    """The repository storage has never been initialized."""

    def __init__(self, message: str = "repository not initialized") -> None:
        super().__init__(message, code="NOT_INITIALIZED")
