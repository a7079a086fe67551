"""SQLite connection management and schema."""
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from . import config

logger = logging.getLogger(__name__)


# SQLite3 datetime adapter (Python 3.12 compatibility)
def _adapt_datetime(dt: datetime) -> str:
    """Adapt datetime to ISO 8601 string for SQLite."""
    return dt.isoformat()


sqlite3.register_adapter(datetime, _adapt_datetime)


def create_connection() -> sqlite3.Connection:
    """Open a new connection to the configured database.

    Each request owns its connection and closes it when done. Foreign keys
    are enforced so cascades must be performed explicitly and in order.
    """
    # Read config at call time so test patches are respected
    conn = sqlite3.connect(config.DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Commit on success, roll back on any exception."""
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'USER' CHECK(role IN ('USER', 'MODERATOR', 'ADMIN')),
        enabled INTEGER NOT NULL DEFAULT 1,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY,
        user_id INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        expires_at TIMESTAMP NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS photos (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT,
        original_filename TEXT,
        storage_key TEXT NOT NULL UNIQUE,
        thumbnail_key TEXT NOT NULL,
        content_type TEXT NOT NULL,
        size INTEGER NOT NULL DEFAULT 0,
        visibility TEXT NOT NULL DEFAULT 'PRIVATE' CHECK(visibility IN ('PRIVATE', 'PUBLIC')),
        owner_id INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (owner_id) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS albums (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        description TEXT,
        owner_id INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (owner_id) REFERENCES users(id),
        UNIQUE(owner_id, name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS album_photos (
        album_id INTEGER NOT NULL,
        photo_id INTEGER NOT NULL,
        added_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (album_id, photo_id),
        FOREIGN KEY (album_id) REFERENCES albums(id),
        FOREIGN KEY (photo_id) REFERENCES photos(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS shares (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        photo_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        permission_level TEXT NOT NULL DEFAULT 'READ' CHECK(permission_level IN ('READ', 'COMMENT', 'ADMIN')),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (photo_id) REFERENCES photos(id),
        FOREIGN KEY (user_id) REFERENCES users(id),
        UNIQUE(photo_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS comments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        text TEXT NOT NULL,
        photo_id INTEGER NOT NULL,
        author_id INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (photo_id) REFERENCES photos(id),
        FOREIGN KEY (author_id) REFERENCES users(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_photos_owner_id ON photos(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_photos_visibility ON photos(visibility)",
    "CREATE INDEX IF NOT EXISTS idx_albums_owner_id ON albums(owner_id)",
    "CREATE INDEX IF NOT EXISTS idx_shares_user_id ON shares(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_shares_photo_id ON shares(photo_id)",
    "CREATE INDEX IF NOT EXISTS idx_comments_photo_id ON comments(photo_id)",
    "CREATE INDEX IF NOT EXISTS idx_comments_author_id ON comments(author_id)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_user_id ON sessions(user_id)",
]


def init_db(conn: sqlite3.Connection | None = None) -> None:
    """Initialize database schema."""
    own_connection = conn is None
    db = conn or create_connection()
    try:
        for statement in SCHEMA:
            db.execute(statement)
        db.commit()
        logger.info("Database schema ready at %s", config.DATABASE_PATH)
    finally:
        if own_connection:
            db.close()
