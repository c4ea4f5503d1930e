"""Guarded row operations.

Every read and write goes through the access rules with the identity held
by the owning Core:

- Rows the identity cannot SELECT are reported as ResourceNotFound, never
  as forbidden, so their existence does not leak.
- Writes the rules deny raise PermissionDenied.
- Updates are checked against both the stored row and the row as it will
  be written.

IMPORT CONVENTION:
- Core hands these out through core.rows(entity) and the entity properties
- NO direct construction needed when using Core API
"""

import logging
import sqlite3
from typing import TYPE_CHECKING, Any

from ..access import EntityKind, Identity, Operation, authorize, ensure_allowed, filter_visible
from ..exceptions import PermissionDenied, ResourceNotFound, ValidationError
from ..utils import timestamp
from .tables import TABLES, Table

if TYPE_CHECKING:
    from . import Core

logger = logging.getLogger(__name__)


class GuardedTable:
    """CRUD operations on one table, filtered by the access rules."""

    def __init__(self, conn: sqlite3.Connection, table: Table, core: "Core | None" = None,
                 identity: Identity | None = None):
        """Initialize guarded operations.

        Args:
            conn: SQLite connection with row_factory set to sqlite3.Row
            table: Metadata of the table to operate on
            core: Owning Core; supplies the identity and commit policy
            identity: Acting identity when used without a Core
        """
        self._conn = conn
        self._table = table
        self._core = core
        self._identity = identity

    @classmethod
    def for_entity(cls, conn: sqlite3.Connection, entity: EntityKind | str,
                   identity: Identity | None = None) -> "GuardedTable":
        return cls(conn, TABLES[EntityKind(entity)], identity=identity)

    @property
    def identity(self) -> Identity | None:
        if self._core is not None:
            return self._core.identity
        return self._identity

    @property
    def entity(self) -> EntityKind:
        return self._table.entity

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_columns(self, columns) -> None:
        unknown = sorted(set(columns) - set(self._table.columns))
        if unknown:
            raise ValidationError(
                f"Unknown column(s) for {self._table.name}: {', '.join(unknown)}",
                {"columns": unknown},
            )

    def _where(self, where: dict[str, Any]) -> tuple[str, list[Any]]:
        self._check_columns(where)
        if not where:
            return "", []
        clause = " AND ".join(f"{column} = ?" for column in where)
        return f" WHERE {clause}", list(where.values())

    def _key_of(self, row: sqlite3.Row | dict) -> dict[str, Any]:
        return {column: row[column] for column in self._table.key}

    def _fetch(self, where: dict[str, Any]) -> sqlite3.Row | None:
        clause, params = self._where(where)
        return self._conn.execute(
            f"SELECT * FROM {self._table.sql_name}{clause}", params
        ).fetchone()

    def _commit(self) -> None:
        if self._core is None or not self._core.atomic:
            self._conn.commit()

    def _not_found(self, where: dict[str, Any]) -> ResourceNotFound:
        return ResourceNotFound(f"{self._table.name} not found", {"where": dict(where)})

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, **where: Any) -> sqlite3.Row:
        """Get a single visible row.

        Raises:
            ResourceNotFound: If no row matches or the row is not visible
        """
        row = self._fetch(where)
        if row is None or not authorize(self.identity, self.entity, Operation.SELECT, row):
            raise self._not_found(where)
        return row

    def list(
        self,
        filters: dict[str, Any] | None = None,
        limit: int = 100,
        offset: int = 0
    ) -> list[sqlite3.Row]:
        """List visible rows matching `filters` (None values are ignored).

        Visibility is applied before paging so hidden rows never count
        towards `limit`.

        Raises:
            ValidationError: If `limit` or `offset` is negative
        """
        if limit < 0 or offset < 0:
            raise ValidationError(
                "limit and offset must not be negative",
                {"limit": limit, "offset": offset},
            )
        conditions = {k: v for k, v in (filters or {}).items() if v is not None}
        clause, params = self._where(conditions)
        order = f" ORDER BY {self._table.order_by}" if self._table.order_by else ""
        rows = self._conn.execute(
            f"SELECT * FROM {self._table.sql_name}{clause}{order}", params
        ).fetchall()
        visible = filter_visible(self.identity, self.entity, rows)
        return visible[offset:offset + limit]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, values: dict[str, Any]) -> sqlite3.Row:
        """Insert a row after checking it against the INSERT rules.

        Returns:
            The stored row, including defaults filled in by SQLite

        Raises:
            PermissionDenied: If the rules reject the row
            ValidationError: On unknown columns or constraint violations
        """
        self._check_columns(values)
        try:
            ensure_allowed(self.identity, self.entity, Operation.INSERT, values)
        except PermissionDenied:
            logger.warning(f"Denied insert into {self._table.name} for {self.identity!r}")
            raise

        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        try:
            cursor = self._conn.execute(
                f"INSERT INTO {self._table.sql_name} ({columns}) VALUES ({placeholders})",
                list(values.values()),
            )
        except sqlite3.IntegrityError as e:
            raise ValidationError(
                f"{self._table.name} row violates a constraint",
                {"reason": str(e)},
            )

        if self._table.autoincrement and "id" not in values:
            key = {"id": cursor.lastrowid}
        else:
            key = self._key_of(values)
        self._commit()
        return self._fetch(key)

    def update(self, where: dict[str, Any], changes: dict[str, Any]) -> sqlite3.Row:
        """Update one visible row.

        Raises:
            ResourceNotFound: If the row does not exist or is not visible
            PermissionDenied: If the rules reject the stored or written row
            ValidationError: On unknown columns or changes to fixed columns
        """
        self._check_columns(changes)
        fixed = sorted(set(changes) & (set(self._table.immutable) | set(self._table.key)))
        if fixed:
            raise ValidationError(
                f"Column(s) cannot be changed: {', '.join(fixed)}",
                {"columns": fixed},
            )

        existing = self.get(**where)
        if not changes:
            return existing

        written = {**dict(existing), **changes}
        try:
            ensure_allowed(self.identity, self.entity, Operation.UPDATE, existing, written)
        except PermissionDenied:
            logger.warning(f"Denied update of {self._table.name} for {self.identity!r}")
            raise

        changes = dict(changes)
        if self._table.touch:
            changes["updated_ts"] = timestamp.now()
        assignments = ", ".join(f"{column} = ?" for column in changes)
        key = self._key_of(existing)
        clause, params = self._where(key)
        try:
            self._conn.execute(
                f"UPDATE {self._table.sql_name} SET {assignments}{clause}",
                list(changes.values()) + params,
            )
        except sqlite3.IntegrityError as e:
            raise ValidationError(
                f"{self._table.name} row violates a constraint",
                {"reason": str(e)},
            )
        self._commit()
        return self._fetch(key)

    def delete(self, **where: Any) -> None:
        """Delete one visible row; dependent rows go with it via cascade.

        Raises:
            ResourceNotFound: If the row does not exist or is not visible
            PermissionDenied: If the DELETE rules reject the row
        """
        existing = self.get(**where)
        try:
            ensure_allowed(self.identity, self.entity, Operation.DELETE, existing)
        except PermissionDenied:
            logger.warning(f"Denied delete from {self._table.name} for {self.identity!r}")
            raise

        clause, params = self._where(self._key_of(existing))
        self._conn.execute(f"DELETE FROM {self._table.sql_name}{clause}", params)
        self._commit()

    def upsert(self, values: dict[str, Any]) -> sqlite3.Row:
        """Insert a row, or update the non-key columns of the existing one."""
        self._check_columns(values)
        missing = [column for column in self._table.key if column not in values]
        if missing:
            raise ValidationError(
                f"Upsert into {self._table.name} needs key column(s): {', '.join(missing)}",
                {"columns": missing},
            )
        key = self._key_of(values)
        existing = self._fetch(key)
        if existing is None:
            return self.insert(values)
        changes = {k: v for k, v in values.items() if k not in self._table.key}
        return self.update(key, changes)
