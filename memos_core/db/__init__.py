"""Database module for memos-core.

This module provides the Core API for database operations.
Core encapsulates the connection and the acting identity, and hands out
guarded operations for every entity.

ARCHITECTURE:
- Core owns its connection (no Flask g.db dependency)
- Core carries the acting Identity explicitly; every operation it hands out
  checks rows against the access rules with that identity
- atomic=True: commit or rollback on context exit
- atomic=False: each write commits on its own

USAGE:
    core = get_core(identity)
    memo = core.memo.create("hello", visibility=Visibility.PUBLIC)

    with get_core(identity, atomic=True) as core:
        core.memo.set_pinned(memo["uid"], True)
        core.rows(EntityKind.ACTIVITY).insert({...})
"""

import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

from ..access import EntityKind, Identity
from ..config import settings
from ..exceptions import DatabaseError

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent.parent / "schema" / "schema.sql"


if TYPE_CHECKING:
    from .inbox import InboxOperations
    from .memo import MemoOperations
    from .reaction import ReactionOperations
    from .rows import GuardedTable


class Core:
    """
    Database Core with guarded entity operations.

    Connection Lifecycle:
    - atomic=True: Connection closes on __exit__ from context manager
    - atomic=False: Writes commit immediately; connection closes on close()
    """

    def __init__(self, connection: sqlite3.Connection, identity: Identity | None = None,
                 atomic: bool = False):
        """Initialize Core with a database connection.

        Args:
            connection: SQLite connection with row_factory set to sqlite3.Row
            identity: Acting identity for every operation, None for anonymous
            atomic: If True, Core MUST be used as context manager.
        """
        self._conn = connection
        self._identity = identity
        self._atomic = atomic
        self._rows: dict[EntityKind, "GuardedTable"] = {}
        self._memo_ops = None
        self._inbox_ops = None
        self._reaction_ops = None

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def atomic(self) -> bool:
        return self._atomic

    def rows(self, entity: EntityKind | str) -> "GuardedTable":
        """Guarded CRUD operations for any entity.

        Raises:
            ValueError: If `entity` is not a known entity kind
        """
        entity = EntityKind(entity)
        if entity not in self._rows:
            from .rows import GuardedTable
            from .tables import TABLES
            self._rows[entity] = GuardedTable(self._conn, TABLES[entity], core=self)
        return self._rows[entity]

    @property
    def memo(self) -> "MemoOperations":
        """Memo operations. Lazy-loaded and cached."""
        if self._memo_ops is None:
            from .memo import MemoOperations
            self._memo_ops = MemoOperations(self._conn, core=self)
        return self._memo_ops

    @property
    def inbox(self) -> "InboxOperations":
        if self._inbox_ops is None:
            from .inbox import InboxOperations
            self._inbox_ops = InboxOperations(self._conn, core=self)
        return self._inbox_ops

    @property
    def reaction(self) -> "ReactionOperations":
        if self._reaction_ops is None:
            from .reaction import ReactionOperations
            self._reaction_ops = ReactionOperations(self._conn, core=self)
        return self._reaction_ops

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "Core":
        """Enter context manager for atomic transaction.

        Raises:
            RuntimeError: If Core was not created with atomic=True
        """
        if not self._atomic:
            raise RuntimeError(
                "Core must be created with atomic=True for context manager use. "
                "Use: with get_core(identity, atomic=True) as core:"
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Commit on success, roll back on exception, then close."""
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        finally:
            self._conn.close()


def _create_connection() -> sqlite3.Connection:
    """Create a fresh database connection.

    Returns:
        SQLite connection with row_factory set to sqlite3.Row
        and foreign keys enabled.
    """
    db_path = Path(settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_core(identity: Identity | None = None, atomic: bool = False) -> Core:
    """
    Get a database Core acting as `identity`.

    Args:
        identity: Acting identity; None means anonymous and is denied by
                  every rule except the open memo-relation rule.
        atomic: If True, returns a Core that MUST be used as context manager.

    Examples:
        >>> core = get_core(Identity(7))
        >>> core.memo.get_by_uid(uid)

        >>> with get_core(Identity(7), atomic=True) as core:
        ...     memo = core.memo.create("draft")
        ...     core.memo.set_pinned(memo["uid"], True)
    """
    return Core(_create_connection(), identity=identity, atomic=atomic)


# ============================================================================
# DATABASE INITIALIZATION
# ============================================================================

def apply_schema(conn: sqlite3.Connection) -> None:
    """Run schema.sql on a connection."""
    with open(SCHEMA_PATH, "r") as f:
        conn.executescript(f.read())
    conn.commit()


def init_db() -> None:
    """Initialize database by running schema.sql if not already initialized."""
    db_path = Path(settings.database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    try:
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='migration_history'"
        )
        if cursor.fetchone():
            return

        apply_schema(conn)
        logger.info(f"Applied schema to {db_path}")
    except sqlite3.Error as e:
        raise DatabaseError(f"Failed to initialize database: {e}", {"path": str(db_path)})
    finally:
        conn.close()


def get_schema_version(conn: sqlite3.Connection) -> str:
    """Return the latest applied migration version."""
    row = conn.execute(
        "SELECT version FROM migration_history ORDER BY version DESC LIMIT 1"
    ).fetchone()
    return row[0] if row else "unknown"
