"""Memo operations.

IMPORT CONVENTION:
- Core accesses these through core.memo property

Memos are addressed by their public `uid`. The creator is always the acting
identity; callers cannot pass a creator_id.
"""

import json
import sqlite3
from typing import Any

from ..access import EntityKind
from ..exceptions import ResourceNotFound
from ..schema.types import RowStatus, Visibility
from ..utils import uid
from .rows import GuardedTable
from .tables import TABLES


class MemoOperations(GuardedTable):
    """Memo operations, plus per-user organization and memo relations."""

    def __init__(self, conn: sqlite3.Connection, core=None):
        super().__init__(conn, TABLES[EntityKind.MEMO], core=core)
        self._organizers = GuardedTable(conn, TABLES[EntityKind.MEMO_ORGANIZER], core=core)
        self._relations = GuardedTable(conn, TABLES[EntityKind.MEMO_RELATION], core=core)

    def create(
        self,
        content: str,
        visibility: Visibility = Visibility.PRIVATE,
        payload: dict[str, Any] | None = None
    ) -> sqlite3.Row:
        """Create a memo owned by the acting identity.

        Raises:
            PermissionDenied: If there is no acting identity
        """
        identity = self.identity
        return self.insert({
            "uid": uid.generate_uid(),
            "creator_id": identity.user_id if identity else None,
            "content": content,
            "visibility": Visibility(visibility).value,
            "payload": json.dumps(payload or {}),
        })

    def get_by_uid(self, memo_uid: str) -> sqlite3.Row:
        """Get a memo the acting identity can see.

        Raises:
            ResourceNotFound: If the memo doesn't exist or is not visible
        """
        try:
            return self.get(uid=memo_uid)
        except ResourceNotFound:
            raise ResourceNotFound(f"Memo '{memo_uid}' not found", {"uid": memo_uid})

    def list_memos(
        self,
        creator_id: int | None = None,
        visibility: Visibility | None = None,
        row_status: RowStatus | None = RowStatus.NORMAL,
        limit: int = 100,
        offset: int = 0
    ) -> list[sqlite3.Row]:
        """List memos visible to the acting identity, newest first."""
        filters = {
            "creator_id": creator_id,
            "visibility": Visibility(visibility).value if visibility else None,
            "row_status": RowStatus(row_status).value if row_status else None,
        }
        return self.list(filters, limit=limit, offset=offset)

    def update_by_uid(self, memo_uid: str, changes: dict[str, Any]) -> sqlite3.Row:
        """Update a memo; only its creator may do so."""
        memo = self.get_by_uid(memo_uid)
        changes = {k: v for k, v in changes.items() if v is not None}
        for enum_column, enum_type in (("visibility", Visibility), ("row_status", RowStatus)):
            if changes.get(enum_column) is not None:
                changes[enum_column] = enum_type(changes[enum_column]).value
        if "payload" in changes and not isinstance(changes["payload"], str):
            changes["payload"] = json.dumps(changes["payload"])
        return self.update({"id": memo["id"]}, changes)

    def delete_by_uid(self, memo_uid: str) -> None:
        """Delete a memo; organizer rows, relations and resources cascade."""
        memo = self.get_by_uid(memo_uid)
        self.delete(id=memo["id"])

    # ------------------------------------------------------------------
    # Organizer (per-user pin state)
    # ------------------------------------------------------------------

    def set_pinned(self, memo_uid: str, pinned: bool) -> sqlite3.Row:
        """Pin or unpin a visible memo for the acting identity only."""
        memo = self.get_by_uid(memo_uid)
        identity = self.identity
        return self._organizers.upsert({
            "memo_id": memo["id"],
            "user_id": identity.user_id if identity else None,
            "pinned": int(pinned),
        })

    def get_organizer(self, memo_uid: str) -> sqlite3.Row | None:
        """Return the acting identity's organizer row for a memo, if any."""
        memo = self.get_by_uid(memo_uid)
        identity = self.identity
        if identity is None:
            return None
        rows = self._organizers.list({"memo_id": memo["id"], "user_id": identity.user_id})
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    def relate(self, memo_uid: str, related_uid: str, relation_type: str) -> sqlite3.Row:
        """Link two memos. Both must be visible to the acting identity."""
        memo = self.get_by_uid(memo_uid)
        related = self.get_by_uid(related_uid)
        return self._relations.insert({
            "memo_id": memo["id"],
            "related_memo_id": related["id"],
            "type": relation_type,
        })

    def list_relations(self, memo_uid: str) -> list[sqlite3.Row]:
        memo = self.get_by_uid(memo_uid)
        return self._relations.list({"memo_id": memo["id"]})

    def unrelate(self, memo_uid: str, related_uid: str, relation_type: str) -> None:
        memo = self.get_by_uid(memo_uid)
        related = self.get_by_uid(related_uid)
        self._relations.delete(
            memo_id=memo["id"], related_memo_id=related["id"], type=relation_type
        )
