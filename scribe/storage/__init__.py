"""
Storage abstractions.

- CredentialStore → users
- ContentStore → posts and comments

Backends: in-memory (default) and SQLite (DATABASE_URL=sqlite:///...).
"""

from __future__ import annotations

import logging

from scribe.config import Settings
from scribe.storage.base import (
    ContentStore,
    CredentialStore,
    StorageProvider,
)
from scribe.storage.local import InMemoryContentStore, InMemoryCredentialStore
from scribe.storage.sqlite import (
    SQLiteContentStore,
    SQLiteCredentialStore,
    SQLiteDatabase,
    resolve_sqlite_path,
)

logger = logging.getLogger(__name__)


def create_local_storage() -> StorageProvider:
    """In-memory stores; everything is lost on restart."""
    return StorageProvider(
        credentials=InMemoryCredentialStore(),
        content=InMemoryContentStore(),
    )


def create_sqlite_storage(path: str) -> StorageProvider:
    db = SQLiteDatabase(path)
    db.initialize()
    return StorageProvider(
        credentials=SQLiteCredentialStore(db),
        content=SQLiteContentStore(db),
    )


def create_storage(settings: Settings) -> StorageProvider:
    """Pick a backend from settings.database_url."""
    if not settings.database_url:
        logger.info("DATABASE_URL not set - using in-memory storage")
        return create_local_storage()

    path = resolve_sqlite_path(settings.database_url)
    logger.info(f"Using SQLite storage at {path}")
    return create_sqlite_storage(path)


__all__ = [
    "ContentStore",
    "CredentialStore",
    "StorageProvider",
    "InMemoryContentStore",
    "InMemoryCredentialStore",
    "SQLiteContentStore",
    "SQLiteCredentialStore",
    "SQLiteDatabase",
    "create_local_storage",
    "create_sqlite_storage",
    "create_storage",
]
