from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import TodoStatus


def _blank_status_to_none(value: Any) -> Any:
    """An empty status string means "not supplied"."""
    if isinstance(value, str) and value == "":
        return None
    return value


# PUBLIC_INTERFACE
def to_validation_error(exc: PydanticValidationError) -> ValidationError:
    """
    Translate the first error of a pydantic ValidationError into a todo store
    ValidationError, keeping the offending field name when pydantic reports one.
    """
    first = exc.errors()[0]
    loc = first.get("loc") or ()
    field = str(loc[0]) if loc else None
    message = str(first.get("msg", "invalid input"))
    # Errors raised from our own validators carry pydantic's "Value error, " prefix
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    if field is not None:
        message = f"{field}: {message}"
    return ValidationError(message, field=field)


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for inserting a new todo item.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "description": "Buy groceries",
                "status": "NotDone",
            }
        }
    )

    description: str = Field(..., description="Text of the todo item, must not be empty")
    status: TodoStatus = Field(
        default=TodoStatus.NOT_DONE,
        description="Completion status; defaults to NotDone when omitted or empty",
    )

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        if len(v) == 0:
            raise ValueError("must be a non-empty string")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        """
        None or an empty string fall back to NotDone.
        """
        v = _blank_status_to_none(v)
        return TodoStatus.NOT_DONE if v is None else v


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for a partial update of an existing todo item.
    Fields left as None (or an empty status) keep their stored value.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "description": "Buy groceries and supplies",
                "status": "Done",
            }
        }
    )

    description: Optional[str] = Field(default=None, description="New text of the todo item")
    status: Optional[TodoStatus] = Field(default=None, description="New completion status")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        """
        An explicitly supplied description must not be empty; a stored record
        can never lose its description through an update.
        """
        if v is not None and len(v) == 0:
            raise ValueError("must not be empty, an update cannot clear the description")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def blank_status(cls, v: Any) -> Any:
        return _blank_status_to_none(v)


# PUBLIC_INTERFACE
class TodoRecord(BaseModel):
    """
    Read-only view of a stored todo item handed out by repositories.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "5f0c6f9e-5f8e-4a43-a2a4-2b8f1c1d9e10",
                "description": "Buy groceries",
                "status": "NotDone",
                "created_at": "2024-11-10T10:15:30.123456+00:00",
                "updated_at": "2024-11-10T10:15:30.123456+00:00",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    description: str = Field(..., description="Text of the todo item")
    status: TodoStatus = Field(..., description="Completion status")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
