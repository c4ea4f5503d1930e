"""Reaction operations. Anyone signed in can read; only the creator adds or removes."""

import sqlite3

from ..access import EntityKind
from .rows import GuardedTable
from .tables import TABLES


class ReactionOperations(GuardedTable):

    def __init__(self, conn: sqlite3.Connection, core=None):
        super().__init__(conn, TABLES[EntityKind.REACTION], core=core)

    def add(self, content_id: str, reaction_type: str) -> sqlite3.Row:
        """Add a reaction by the acting identity.

        Raises:
            ValidationError: If the same reaction already exists
        """
        identity = self.identity
        return self.insert({
            "creator_id": identity.user_id if identity else None,
            "content_id": content_id,
            "reaction_type": reaction_type,
        })

    def list_for_content(self, content_id: str) -> list[sqlite3.Row]:
        return self.list({"content_id": content_id}, limit=1000)

    def remove(self, reaction_id: int) -> None:
        self.delete(id=reaction_id)
