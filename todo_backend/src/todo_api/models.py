from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    Storage-level representation of a Todo item.

    Fields:
    - id: Store-assigned integer identifier, immutable
    - body: Free text supplied by the client
    - created_at: UTC creation timestamp, set once
    - updated_at: UTC timestamp of the last successful update
    """

    id: int
    body: str
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class SecretEntity(TypedDict):
    """Storage-level representation of an opaque secret key record."""

    id: int
    key: str
