"""Domain enumerations shared by the schema and the access rules.

Values match the CHECK constraints in schema.sql, so members can be written
to and read from the database as plain strings.
"""

from enum import Enum


class Role(str, Enum):
    """User role, ordered HOST > ADMIN > USER."""

    HOST = "HOST"
    ADMIN = "ADMIN"
    USER = "USER"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def satisfies(self, required: "Role") -> bool:
        """Return True if this role is at least as privileged as `required`."""
        return self.rank >= required.rank


_ROLE_RANK = {Role.USER: 0, Role.ADMIN: 1, Role.HOST: 2}


class Visibility(str, Enum):
    PUBLIC = "PUBLIC"
    PROTECTED = "PROTECTED"
    PRIVATE = "PRIVATE"


class RowStatus(str, Enum):
    NORMAL = "NORMAL"
    ARCHIVED = "ARCHIVED"


class InboxStatus(str, Enum):
    UNREAD = "UNREAD"
    ARCHIVED = "ARCHIVED"
