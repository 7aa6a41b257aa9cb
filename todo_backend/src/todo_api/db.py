from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List

from .exceptions import NotFoundError, StoreError
from .models import SecretEntity, TodoEntity
from .repositories import Repository, SecretRepository, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _TodoCols:
    table: str = "todos"
    id: str = "id"
    body: str = "body"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


@dataclass(frozen=True)
class _SecretCols:
    table: str = "secrets"
    id: str = "id"
    key: str = "key"


_TODO = _TodoCols()
_SECRET = _SecretCols()


@contextmanager
def _connect(db_path: str, timeout: float) -> Generator[sqlite3.Connection, None, None]:
    """
    Open a connection for a single operation, commit on success and translate
    driver errors into StoreError.
    """
    try:
        conn = sqlite3.connect(db_path, timeout=timeout)
    except sqlite3.Error as exc:
        raise StoreError(f"db: connect error: {exc}") from exc
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise StoreError(f"db: query error: {exc}") from exc
    finally:
        conn.close()


# PUBLIC_INTERFACE
def bootstrap_schema(db_path: str, timeout: float = 5.0) -> None:
    """Create the todos and secrets tables if they do not exist yet."""
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
    with _connect(db_path, timeout) as conn:
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {_TODO.table} (
                {_TODO.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                {_TODO.body} TEXT NOT NULL,
                {_TODO.created_at} TEXT NOT NULL,
                {_TODO.updated_at} TEXT NOT NULL
            )
            """
        )
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {_SECRET.table} (
                {_SECRET.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                {_SECRET.key} TEXT NOT NULL
            )
            """
        )
    logger.info("Schema ready at %s", db_path)


def _row_to_todo(row: sqlite3.Row) -> TodoEntity:
    try:
        return {
            "id": int(row[_TODO.id]),
            "body": str(row[_TODO.body]),
            "created_at": datetime.fromisoformat(row[_TODO.created_at]),
            "updated_at": datetime.fromisoformat(row[_TODO.updated_at]),
        }
    except (IndexError, KeyError, TypeError, ValueError) as exc:
        raise StoreError(f"db: cannot decode {_TODO.table} row: {exc}") from exc


class SQLiteRepository(Repository):
    """
    SQLite-backed todo repository. Every operation opens its own connection,
    so a single instance is safe to share across request threads.
    """

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._timeout = timeout

    def _conn(self):
        return _connect(self._db_path, self._timeout)

    def list_all(self) -> List[TodoEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT {_TODO.id}, {_TODO.body}, {_TODO.created_at}, {_TODO.updated_at} FROM {_TODO.table}"
            ).fetchall()
        return [_row_to_todo(r) for r in rows]

    def insert(self, body: str) -> TodoEntity:
        now = utcnow()
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_TODO.table} ({_TODO.body}, {_TODO.created_at}, {_TODO.updated_at})
                VALUES (?, ?, ?)
                """,
                (body, now.isoformat(), now.isoformat()),
            )
            new_id = cur.lastrowid
        if not new_id:
            raise StoreError("db: insert did not return an id")
        return {"id": int(new_id), "body": body, "created_at": now, "updated_at": now}

    def get_by_id(self, todo_id: int) -> TodoEntity:
        with self._conn() as conn:
            row = conn.execute(
                f"""
                SELECT {_TODO.id}, {_TODO.body}, {_TODO.created_at}, {_TODO.updated_at}
                FROM {_TODO.table} WHERE {_TODO.id} = ?
                """,
                (todo_id,),
            ).fetchone()
        if row is None:
            raise NotFoundError("todo", todo_id)
        return _row_to_todo(row)

    def update(self, todo_id: int, body: str) -> TodoEntity:
        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE {_TODO.table} SET {_TODO.body} = ?, {_TODO.updated_at} = ? WHERE {_TODO.id} = ?",
                (body, utcnow().isoformat(), todo_id),
            )
            affected = cur.rowcount
        if affected == 0:
            raise NotFoundError("todo", todo_id)
        # Re-read in a separate statement; a concurrent delete in between surfaces as NotFoundError.
        return self.get_by_id(todo_id)

    def delete_by_id(self, todo_id: int) -> None:
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {_TODO.table} WHERE {_TODO.id} = ?", (todo_id,))


class SQLiteSecretRepository(SecretRepository):
    """SQLite-backed secrets repository (insert only)."""

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._timeout = timeout

    def insert(self, key: str) -> SecretEntity:
        with _connect(self._db_path, self._timeout) as conn:
            cur = conn.execute(
                f"INSERT INTO {_SECRET.table} ({_SECRET.key}) VALUES (?)",
                (key,),
            )
            new_id = cur.lastrowid
        if not new_id:
            raise StoreError("db: insert did not return an id")
        return {"id": int(new_id), "key": key}
