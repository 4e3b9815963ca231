from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoStatus(str, Enum):
    """Completion state of a todo item."""

    DONE = "Done"
    NOT_DONE = "NotDone"


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    Storage shape of a todo item inside a repository.

    Fields:
    - id: Opaque unique identifier, assigned at creation and never changed
    - description: Non-empty text of the item
    - status: TodoStatus.DONE or TodoStatus.NOT_DONE
    - created_at: Clock value at creation, never changed
    - updated_at: Clock value of the last mutation (equals created_at after insert)
    """

    id: str
    description: str
    status: TodoStatus
    created_at: datetime
    updated_at: datetime
