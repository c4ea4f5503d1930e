"""Row-level access rules for every persisted entity.

Rules are permissive policies evaluated the way PostgreSQL row security
evaluates them:

- SELECT and DELETE check each policy's USING predicate against the existing row.
- INSERT checks WITH CHECK against the row being written.
- UPDATE needs USING to pass on the existing row and WITH CHECK to pass on
  the row as it will be written. A policy without WITH CHECK reuses USING.
- Policies for the same entity and operation are OR-combined. An operation
  with no applicable policy is denied.

Administrative rules carry a required role instead of granting access to
every authenticated caller.

IMPORT CONVENTION:
    from memos_core.access import authorize, EntityKind, Operation
    decision = authorize(identity, EntityKind.MEMO, Operation.SELECT, row)
"""

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from ..exceptions import PermissionDenied
from ..schema.types import Role, Visibility

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    """Entities guarded by row rules. Values are table names."""

    MIGRATION_HISTORY = "migration_history"
    SYSTEM_SETTING = "system_setting"
    USER = "user"
    USER_SETTING = "user_setting"
    MEMO = "memo"
    MEMO_ORGANIZER = "memo_organizer"
    MEMO_RELATION = "memo_relation"
    RESOURCE = "resource"
    ACTIVITY = "activity"
    IDENTITY_PROVIDER = "idp"
    INBOX = "inbox"
    REACTION = "reaction"


class Operation(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


ALL_OPERATIONS = frozenset(Operation)
WRITE_OPERATIONS = frozenset({Operation.INSERT, Operation.UPDATE, Operation.DELETE})


class Decision(str, Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class Identity:
    """The acting user for one request."""

    user_id: int
    role: Role = Role.USER


@dataclass(frozen=True)
class RowView:
    """Ownership and visibility columns of a row; nothing else is needed."""

    id: Any = None
    user_id: Any = None
    creator_id: Any = None
    sender_id: Any = None
    receiver_id: Any = None
    memo_id: Any = None
    related_memo_id: Any = None
    visibility: Any = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "RowView":
        """Project a dict or sqlite3.Row onto the columns the rules read."""
        keys = set(mapping.keys())
        return cls(**{f.name: mapping[f.name] for f in fields(cls) if f.name in keys})


Predicate = Callable[[Identity | None, RowView], bool]


def _always(identity: Identity | None, row: RowView) -> bool:
    return True


def _owner(column: str) -> Predicate:
    """Predicate: the acting identity equals `row.<column>`."""

    def check(identity: Identity | None, row: RowView) -> bool:
        return identity is not None and getattr(row, column) == identity.user_id

    check.__name__ = f"owner_{column}"
    return check


def _any_of(*predicates: Predicate) -> Predicate:
    def check(identity: Identity | None, row: RowView) -> bool:
        return any(p(identity, row) for p in predicates)

    check.__name__ = "_or_".join(p.__name__ for p in predicates)
    return check


def _public(identity: Identity | None, row: RowView) -> bool:
    return identity is not None and row.visibility == Visibility.PUBLIC


@dataclass(frozen=True)
class Policy:
    """One permissive rule.

    Attributes:
        name: Human-readable rule name, used in logs.
        operations: Operations the rule applies to.
        using: Predicate on the existing row (SELECT, UPDATE, DELETE).
        with_check: Predicate on the written row (INSERT, UPDATE).
            Falls back to `using` when None.
        required_role: Minimum role of the acting identity, or None.
        authenticated: If True, an anonymous identity never matches.
    """

    name: str
    operations: frozenset[Operation]
    using: Predicate = _always
    with_check: Predicate | None = None
    required_role: Role | None = None
    authenticated: bool = True

    def _admits(self, identity: Identity | None) -> bool:
        if identity is None:
            return not self.authenticated and self.required_role is None
        if self.required_role is not None:
            return identity.role.satisfies(self.required_role)
        return True

    def check_using(self, identity: Identity | None, row: RowView) -> bool:
        return self._admits(identity) and self.using(identity, row)

    def check_written(self, identity: Identity | None, row: RowView) -> bool:
        predicate = self.with_check or self.using
        return self._admits(identity) and predicate(identity, row)


_creator = _owner("creator_id")
_user = _owner("user_id")

POLICIES: dict[EntityKind, tuple[Policy, ...]] = {
    EntityKind.MIGRATION_HISTORY: (
        Policy("Admin can manage migration history", ALL_OPERATIONS,
               required_role=Role.ADMIN),
    ),
    EntityKind.SYSTEM_SETTING: (
        Policy("Anyone can read system settings", frozenset({Operation.SELECT})),
        Policy("Admin can manage system settings", ALL_OPERATIONS,
               required_role=Role.ADMIN),
    ),
    EntityKind.USER: (
        Policy("Users can read all users", frozenset({Operation.SELECT})),
        Policy("Users can update own profile", frozenset({Operation.UPDATE}),
               using=_owner("id")),
    ),
    EntityKind.USER_SETTING: (
        Policy("Users can manage own settings", ALL_OPERATIONS, using=_user),
    ),
    EntityKind.MEMO: (
        Policy("Users can read own or public memos", frozenset({Operation.SELECT}),
               using=_any_of(_creator, _public)),
        Policy("Users can create own memos", frozenset({Operation.INSERT}),
               with_check=_creator),
        Policy("Users can update own memos", frozenset({Operation.UPDATE}),
               using=_creator),
        Policy("Users can delete own memos", frozenset({Operation.DELETE}),
               using=_creator),
    ),
    EntityKind.MEMO_ORGANIZER: (
        Policy("Users can manage own memo organization", ALL_OPERATIONS, using=_user),
    ),
    # Open rule: neither endpoint's creator is checked.
    EntityKind.MEMO_RELATION: (
        Policy("Anyone can manage memo relations", ALL_OPERATIONS,
               authenticated=False),
    ),
    EntityKind.RESOURCE: (
        Policy("Users can read own resources", frozenset({Operation.SELECT}),
               using=_creator),
        Policy("Users can create own resources", frozenset({Operation.INSERT}),
               with_check=_creator),
        Policy("Users can update own resources", frozenset({Operation.UPDATE}),
               using=_creator),
        Policy("Users can delete own resources", frozenset({Operation.DELETE}),
               using=_creator),
    ),
    EntityKind.ACTIVITY: (
        Policy("Users can manage own activities", ALL_OPERATIONS, using=_creator),
    ),
    EntityKind.IDENTITY_PROVIDER: (
        Policy("Users can read identity providers", frozenset({Operation.SELECT})),
        Policy("Admin can manage identity providers", WRITE_OPERATIONS,
               required_role=Role.ADMIN),
    ),
    EntityKind.INBOX: (
        Policy("Users can read own inbox", frozenset({Operation.SELECT}),
               using=_any_of(_owner("receiver_id"), _owner("sender_id"))),
        Policy("Users can send messages", frozenset({Operation.INSERT}),
               with_check=_owner("sender_id")),
        Policy("Users can update own inbox", frozenset({Operation.UPDATE}),
               using=_owner("receiver_id")),
    ),
    EntityKind.REACTION: (
        Policy("Users can read all reactions", frozenset({Operation.SELECT})),
        Policy("Users can create own reactions", frozenset({Operation.INSERT}),
               with_check=_creator),
        Policy("Users can delete own reactions", frozenset({Operation.DELETE}),
               using=_creator),
    ),
}


def policies_for(entity: EntityKind | str) -> tuple[Policy, ...]:
    """Return the rules declared for an entity.

    Raises:
        ValueError: If `entity` is not a known entity kind.
    """
    return POLICIES[EntityKind(entity)]


def _as_row_view(row: RowView | Mapping[str, Any] | None) -> RowView:
    if row is None:
        return RowView()
    if isinstance(row, RowView):
        return row
    return RowView.from_mapping(row)


def authorize(
    identity: Identity | None,
    entity: EntityKind | str,
    operation: Operation | str,
    row: RowView | Mapping[str, Any] | None = None,
    new_row: RowView | Mapping[str, Any] | None = None,
) -> Decision:
    """Decide whether `identity` may perform `operation` on `row`.

    Args:
        identity: Acting identity, or None for anonymous access.
        entity: Entity kind the row belongs to.
        operation: SELECT, INSERT, UPDATE or DELETE.
        row: Existing row for SELECT/UPDATE/DELETE, the row being inserted
            for INSERT.
        new_row: For UPDATE, the row as it will be written. Defaults to `row`.

    Returns:
        Decision.ALLOW or Decision.DENY.

    Raises:
        ValueError: If `entity` or `operation` is unknown.
    """
    policies = policies_for(entity)
    operation = Operation(operation)
    view = _as_row_view(row)
    applicable = [p for p in policies if operation in p.operations]

    if operation is Operation.INSERT:
        allowed = any(p.check_written(identity, view) for p in applicable)
    elif operation is Operation.UPDATE:
        written = view if new_row is None else _as_row_view(new_row)
        allowed = (
            any(p.check_using(identity, view) for p in applicable)
            and any(p.check_written(identity, written) for p in applicable)
        )
    else:
        allowed = any(p.check_using(identity, view) for p in applicable)

    if not allowed:
        logger.debug(
            f"Denied {operation.value} on {EntityKind(entity).value} "
            f"for {identity!r}"
        )
        return Decision.DENY
    return Decision.ALLOW


def ensure_allowed(
    identity: Identity | None,
    entity: EntityKind | str,
    operation: Operation | str,
    row: RowView | Mapping[str, Any] | None = None,
    new_row: RowView | Mapping[str, Any] | None = None,
) -> None:
    """Raise PermissionDenied unless `authorize` returns ALLOW."""
    if not authorize(identity, entity, operation, row, new_row):
        entity = EntityKind(entity)
        raise PermissionDenied(
            f"{Operation(operation).value} on {entity.value} is not permitted",
            {"entity": entity.value, "operation": Operation(operation).value},
        )


def filter_visible(
    identity: Identity | None,
    entity: EntityKind | str,
    rows: Iterable[Mapping[str, Any]],
) -> list:
    """Keep only the rows `identity` is allowed to SELECT."""
    return [row for row in rows if authorize(identity, entity, Operation.SELECT, row)]
