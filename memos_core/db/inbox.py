"""Inbox operations.

A message has two actors: the sender creates it, sender and receiver can
read it, and only the receiver changes its status.
"""

import json
import sqlite3
from typing import Any

from ..access import EntityKind
from ..schema.types import InboxStatus
from .rows import GuardedTable
from .tables import TABLES


class InboxOperations(GuardedTable):

    def __init__(self, conn: sqlite3.Connection, core=None):
        super().__init__(conn, TABLES[EntityKind.INBOX], core=core)

    def send(
        self,
        receiver_id: int,
        message: dict[str, Any] | None = None,
        status: InboxStatus = InboxStatus.UNREAD
    ) -> sqlite3.Row:
        """Send a message from the acting identity to `receiver_id`."""
        identity = self.identity
        return self.insert({
            "sender_id": identity.user_id if identity else None,
            "receiver_id": receiver_id,
            "status": InboxStatus(status).value,
            "message": json.dumps(message or {}),
        })

    def list_messages(
        self,
        status: InboxStatus | None = None,
        limit: int = 100,
        offset: int = 0
    ) -> list[sqlite3.Row]:
        """List messages the acting identity sent or received."""
        filters = {"status": InboxStatus(status).value if status else None}
        return self.list(filters, limit=limit, offset=offset)

    def set_status(self, inbox_id: int, status: InboxStatus) -> sqlite3.Row:
        """Change a message's status; only the receiver may do this."""
        return self.update({"id": inbox_id}, {"status": InboxStatus(status).value})
