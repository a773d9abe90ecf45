"""SQLite-backed persistence for user records."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from .models import User

_USER_COLUMNS = ("name", "email", "phone", "department")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "userhub.sqlite3").resolve(strict=False)


class Database:
    """Simple wrapper around SQLite for persisting users."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and is always closed."""

        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._session() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT,
                    email TEXT,
                    phone TEXT,
                    department TEXT
                );
                """
            )

            columns = {
                row["name"]
                for row in conn.execute("PRAGMA table_info(users)").fetchall()
            }
            for column in _USER_COLUMNS:
                if column not in columns:
                    conn.execute(f"ALTER TABLE users ADD COLUMN {column} TEXT")

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def save_user(self, user: User) -> User:
        """Insert or update ``user`` and return the stored record.

        A user without an id is inserted and receives a fresh id. A user
        carrying an id replaces the row with that id, or is inserted under
        that id when no such row exists.
        """

        values = tuple(getattr(user, column) for column in _USER_COLUMNS)

        with self._session() as conn:
            if user.id is None:
                cursor = conn.execute(
                    "INSERT INTO users (name, email, phone, department) VALUES (?, ?, ?, ?)",
                    values,
                )
                user_id = cursor.lastrowid
            else:
                conn.execute(
                    """
                    INSERT INTO users (id, name, email, phone, department)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        name = excluded.name,
                        email = excluded.email,
                        phone = excluded.phone,
                        department = excluded.department
                    """,
                    (user.id, *values),
                )
                user_id = user.id

        return User(
            id=user_id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            department=user.department,
        )

    def list_users(self) -> List[User]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
        return [self._row_to_user(row) for row in rows]

    def get_user(self, user_id: int) -> Optional[User]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def delete_user(self, user_id: int) -> None:
        """Remove the user with ``user_id``; missing ids are ignored."""

        with self._session() as conn:
            conn.execute("DELETE FROM users WHERE id = ?", (user_id,))

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            department=row["department"],
        )


__all__ = ["Database", "resolve_database_path"]
