from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import List

from .exceptions import NotFoundError
from .models import SecretEntity, TodoEntity
from .settings import Settings


def utcnow() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def list_all(self) -> List[TodoEntity]:
        """Return every stored TodoEntity. Always a list, possibly empty."""

    @abstractmethod
    def insert(self, body: str) -> TodoEntity:
        """Store a new todo and return it with id and timestamps assigned."""

    @abstractmethod
    def get_by_id(self, todo_id: int) -> TodoEntity:
        """Return a TodoEntity by id. Raises NotFoundError if absent."""

    @abstractmethod
    def update(self, todo_id: int, body: str) -> TodoEntity:
        """
        Replace the body of an existing todo, refresh updated_at and return the
        re-read entity. Raises NotFoundError if no row was affected.
        """

    @abstractmethod
    def delete_by_id(self, todo_id: int) -> None:
        """Delete a todo by id. Succeeds whether or not the row existed."""


# PUBLIC_INTERFACE
class SecretRepository(ABC):
    """Abstract repository contract for secret key storage backends."""

    @abstractmethod
    def insert(self, key: str) -> SecretEntity:
        """Store a new secret key and return it with its id assigned."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory todo repository used by tests and the 'memory' backend.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TodoEntity] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def list_all(self) -> List[TodoEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values()]

    def insert(self, body: str) -> TodoEntity:
        now = utcnow()
        entity: TodoEntity = {
            "id": self._allocate_id(),
            "body": body,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def get_by_id(self, todo_id: int) -> TodoEntity:
        with self._lock:
            item = self._items.get(todo_id)
            if item is None:
                raise NotFoundError("todo", todo_id)
            return item.copy()

    def update(self, todo_id: int, body: str) -> TodoEntity:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                raise NotFoundError("todo", todo_id)
            updated = existing.copy()
            updated["body"] = body
            updated["updated_at"] = utcnow()
            self._items[todo_id] = updated
        return self.get_by_id(todo_id)

    def delete_by_id(self, todo_id: int) -> None:
        with self._lock:
            self._items.pop(todo_id, None)


class InMemorySecretRepository(SecretRepository):
    """In-memory counterpart of the secrets table."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, SecretEntity] = {}
        self._next_id = 1

    def insert(self, key: str) -> SecretEntity:
        with self._lock:
            entity: SecretEntity = {"id": self._next_id, "key": key}
            self._items[entity["id"]] = entity
            self._next_id += 1
        return entity.copy()


@dataclass(frozen=True)
class Stores:
    """The store handles an application instance is wired with."""

    todos: Repository
    secrets: SecretRepository


# PUBLIC_INTERFACE
def build_stores(settings: Settings) -> Stores:
    """
    Construct the configured stores based on settings.
    - memory: InMemoryRepository / InMemorySecretRepository
    - sqlite: SQLiteRepository / SQLiteSecretRepository after bootstrapping the schema

    Schema bootstrap errors propagate; they are fatal at startup.
    """
    if settings.persistence_backend == "memory":
        return Stores(todos=InMemoryRepository(), secrets=InMemorySecretRepository())

    from .db import SQLiteRepository, SQLiteSecretRepository, bootstrap_schema

    db_path = settings.sqlite_db_path
    bootstrap_schema(db_path, timeout=settings.db_timeout_seconds)
    return Stores(
        todos=SQLiteRepository(db_path, timeout=settings.db_timeout_seconds),
        secrets=SQLiteSecretRepository(db_path, timeout=settings.db_timeout_seconds),
    )
