from __future__ import annotations


# PUBLIC_INTERFACE
class StoreError(Exception):
    """Raised when a storage statement fails or a row cannot be decoded."""


# PUBLIC_INTERFACE
class NotFoundError(StoreError):
    """Raised when no row matches the requested id."""

    def __init__(self, resource: str, item_id: int) -> None:
        super().__init__(f"{resource} {item_id} not found")
        self.resource = resource
        self.item_id = item_id
