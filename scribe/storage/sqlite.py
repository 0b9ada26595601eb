"""
SQLite-backed persistence for users, posts and comments.

One connection is shared by both stores and guarded by a lock. Every
public method runs in its own transaction on a worker thread, so a slow
or locked database never blocks the event loop.
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, TypeVar
from urllib.parse import urlparse

import anyio

from scribe.core.errors import ValidationFailure
from scribe.core.models import Comment, Post, UserRecord
from scribe.core.utils import ensure_utc, utc_now
from scribe.storage.base import ContentStore, CredentialStore


T = TypeVar("T")

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    email TEXT UNIQUE,
    password_hash TEXT NOT NULL,
    admin INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS posts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    posted_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS comments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    post_id INTEGER NOT NULL,
    username TEXT NOT NULL,
    content TEXT NOT NULL,
    posted_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_posts_posted_at ON posts(posted_at);
CREATE INDEX IF NOT EXISTS idx_comments_post_id ON comments(post_id, posted_at);
"""


def resolve_sqlite_path(database_url: str) -> str:
    """Path (or ":memory:") from a "sqlite:///..." URL."""
    scheme = urlparse(database_url.strip()).scheme.lower()
    if scheme in ("postgres", "postgresql"):
        raise ValueError(
            "PostgreSQL is not supported. Set DATABASE_URL to sqlite:///<path>, "
            "or leave it empty for in-memory storage."
        )
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        raise ValueError(
            f"Unsupported database URL {database_url!r}. Only sqlite:///<path> is supported."
        )
    path = database_url[len(prefix):]
    if not path:
        raise ValueError("SQLite URL must include a path")
    return path


def _serialize_datetime(value: datetime) -> str:
    # Fixed width so lexical order matches chronological order
    return ensure_utc(value).isoformat(timespec="microseconds")


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


class SQLiteDatabase:
    """Simple wrapper around a single SQLite connection."""

    def __init__(self, path: str):
        if path != ":memory:":
            Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""
        with self._lock:
            self._conn.executescript(SCHEMA)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            with self._conn:
                yield self._conn

    async def run(self, work: Callable[[sqlite3.Connection], T]) -> T:
        """Run work in one transaction on a worker thread."""
        return await anyio.to_thread.run_sync(
            self._run_in_transaction,
            work,
            abandon_on_cancel=True,
        )

    def _run_in_transaction(self, work: Callable[[sqlite3.Connection], T]) -> T:
        with self.transaction() as conn:
            return work(conn)

    def close(self) -> None:
        self._conn.close()


# =============================================================================
# SQLite Credential Storage
# =============================================================================


class SQLiteCredentialStore(CredentialStore):
    def __init__(self, db: SQLiteDatabase):
        self._db = db

    async def create_user(
        self,
        username: str,
        email: str | None,
        password_hash: str,
        admin: bool = False,
    ) -> UserRecord:
        created_at = utc_now()
        normalized_email = email.lower() if email else None

        def insert(conn: sqlite3.Connection) -> int:
            cursor = conn.execute(
                """
                INSERT INTO users (username, email, password_hash, admin, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    username,
                    normalized_email,
                    password_hash,
                    1 if admin else 0,
                    _serialize_datetime(created_at),
                ),
            )
            return cursor.lastrowid

        try:
            user_id = await self._db.run(insert)
        except sqlite3.IntegrityError as exc:
            raise ValidationFailure("Username or email already registered") from exc

        return UserRecord(
            id=user_id,
            username=username,
            email=normalized_email,
            password_hash=password_hash,
            admin=admin,
            created_at=created_at,
        )

    async def get_user(self, user_id: int) -> UserRecord | None:
        row = await self._db.run(
            lambda conn: conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        )
        return self._row_to_user(row) if row is not None else None

    async def get_by_identifier(self, identifier: str) -> UserRecord | None:
        row = await self._db.run(
            lambda conn: conn.execute(
                "SELECT * FROM users WHERE username = ? OR email = ? ORDER BY id LIMIT 1",
                (identifier, identifier.strip().lower()),
            ).fetchone()
        )
        return self._row_to_user(row) if row is not None else None

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> UserRecord:
        return UserRecord(
            id=row["id"],
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            admin=bool(row["admin"]),
            created_at=_parse_datetime(row["created_at"]),
        )


# =============================================================================
# SQLite Content Storage
# =============================================================================


class SQLiteContentStore(ContentStore):
    def __init__(self, db: SQLiteDatabase):
        self._db = db

    # -- Posts -----------------------------------------------------------------

    async def create_post(
        self,
        username: str,
        title: str,
        content: str,
        posted_at: datetime,
    ) -> Post:
        post_id = await self._db.run(
            lambda conn: conn.execute(
                "INSERT INTO posts (username, title, content, posted_at) VALUES (?, ?, ?, ?)",
                (username, title, content, _serialize_datetime(posted_at)),
            ).lastrowid
        )
        return Post(
            id=post_id,
            username=username,
            title=title,
            content=content,
            posted_at=ensure_utc(posted_at),
        )

    async def get_post(self, post_id: int) -> Post | None:
        row = await self._db.run(
            lambda conn: conn.execute("SELECT * FROM posts WHERE id = ?", (post_id,)).fetchone()
        )
        return self._row_to_post(row) if row is not None else None

    async def update_post(self, post_id: int, title: str, content: str) -> bool:
        updated = await self._db.run(
            lambda conn: conn.execute(
                "UPDATE posts SET title = ?, content = ? WHERE id = ?",
                (title, content, post_id),
            ).rowcount
        )
        return updated > 0

    async def delete_post_cascade(self, post_id: int) -> bool:
        def delete(conn: sqlite3.Connection) -> bool:
            cursor = conn.execute("DELETE FROM posts WHERE id = ?", (post_id,))
            if cursor.rowcount == 0:
                return False
            conn.execute("DELETE FROM comments WHERE post_id = ?", (post_id,))
            return True

        return await self._db.run(delete)

    async def list_posts(self, offset: int, limit: int) -> list[Post]:
        rows = await self._db.run(
            lambda conn: conn.execute(
                "SELECT * FROM posts ORDER BY posted_at DESC, id ASC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()
        )
        return [self._row_to_post(row) for row in rows]

    # -- Comments --------------------------------------------------------------

    async def create_comment(
        self,
        post_id: int,
        username: str,
        content: str,
        posted_at: datetime,
    ) -> Comment:
        def insert(conn: sqlite3.Connection) -> int:
            exists = conn.execute("SELECT 1 FROM posts WHERE id = ?", (post_id,)).fetchone()
            if exists is None:
                raise ValidationFailure("Post does not exist")
            cursor = conn.execute(
                "INSERT INTO comments (post_id, username, content, posted_at) VALUES (?, ?, ?, ?)",
                (post_id, username, content, _serialize_datetime(posted_at)),
            )
            return cursor.lastrowid

        comment_id = await self._db.run(insert)
        return Comment(
            id=comment_id,
            username=username,
            content=content,
            posted_at=ensure_utc(posted_at),
            post_id=post_id,
        )

    async def get_comment(self, comment_id: int) -> Comment | None:
        row = await self._db.run(
            lambda conn: conn.execute(
                "SELECT * FROM comments WHERE id = ?", (comment_id,)
            ).fetchone()
        )
        return self._row_to_comment(row) if row is not None else None

    async def update_comment(self, comment_id: int, content: str) -> bool:
        updated = await self._db.run(
            lambda conn: conn.execute(
                "UPDATE comments SET content = ? WHERE id = ?",
                (content, comment_id),
            ).rowcount
        )
        return updated > 0

    async def delete_comment(self, comment_id: int) -> bool:
        deleted = await self._db.run(
            lambda conn: conn.execute("DELETE FROM comments WHERE id = ?", (comment_id,)).rowcount
        )
        return deleted > 0

    async def list_comments(self, post_id: int, offset: int, limit: int) -> list[Comment]:
        rows = await self._db.run(
            lambda conn: conn.execute(
                """
                SELECT * FROM comments WHERE post_id = ?
                ORDER BY posted_at DESC, id ASC LIMIT ? OFFSET ?
                """,
                (post_id, limit, offset),
            ).fetchall()
        )
        return [self._row_to_comment(row) for row in rows]

    @staticmethod
    def _row_to_post(row: sqlite3.Row) -> Post:
        return Post(
            id=row["id"],
            username=row["username"],
            title=row["title"],
            content=row["content"],
            posted_at=_parse_datetime(row["posted_at"]),
        )

    @staticmethod
    def _row_to_comment(row: sqlite3.Row) -> Comment:
        return Comment(
            id=row["id"],
            username=row["username"],
            content=row["content"],
            posted_at=_parse_datetime(row["posted_at"]),
            post_id=row["post_id"],
        )
