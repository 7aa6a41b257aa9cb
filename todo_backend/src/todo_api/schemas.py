from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _require_utf8(value: str, field: str) -> str:
    """
    Reject strings that cannot be stored or returned as UTF-8, e.g. JSON
    bodies carrying lone surrogate escapes such as "\\ud800".
    """
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError(f"{field} must be valid UTF-8 text") from e
    return value


# PUBLIC_INTERFACE
class TodoIn(BaseModel):
    """
    Request body for creating or replacing a Todo item. Unknown fields are ignored.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"todo": "buy milk"}})

    todo: str = Field(..., description="Text of the todo item")

    @field_validator("todo")
    @classmethod
    def validate_todo(cls, v: str) -> str:
        return _require_utf8(v, "todo")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "todo": "buy milk",
                "createdAt": "2025-01-25T10:15:30.123456Z",
                "updatedAt": "2025-01-26T09:00:00.000001Z",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    body: str = Field(..., alias="todo", description="Text of the todo item")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., alias="updatedAt", description="Last update timestamp (UTC)")


# PUBLIC_INTERFACE
class SecretIn(BaseModel):
    """Request body for storing a secret key."""

    key: str = Field(..., description="Opaque secret key text")

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        return _require_utf8(v, "key")


# PUBLIC_INTERFACE
class SecretOut(BaseModel):
    """Schema returned by the API for a stored secret."""

    id: int = Field(..., description="Unique identifier of the secret")
    key: str = Field(..., description="Opaque secret key text")


# PUBLIC_INTERFACE
class ErrorEnvelope(BaseModel):
    """
    Body of every non-2xx response.

    Example:
        {"object": "error", "error": "NotFound", "message": "todo 7 not found"}
    """

    object: str = Field("error", description="Always 'error'")
    error: str = Field(..., description="Error kind, e.g. ValidationError, NotFound, StoreError")
    message: str = Field(..., description="Human readable description")
    detail: Optional[List[Any]] = Field(default=None, description="Field errors for validation failures")
