"""Table metadata for guarded row operations.

Column lists mirror schema.sql. Only listed columns may appear in filters,
inserts or updates, which keeps identifiers out of user-controlled SQL.
"""

from dataclasses import dataclass

from ..access import EntityKind


@dataclass(frozen=True)
class Table:
    entity: EntityKind
    key: tuple[str, ...]
    columns: tuple[str, ...]
    # Columns that may not change after insert (ownership and keys)
    immutable: tuple[str, ...] = ()
    # Key is an INTEGER PRIMARY KEY assigned by SQLite
    autoincrement: bool = False
    # Table has an updated_ts column refreshed on every update
    touch: bool = False
    order_by: str = ""

    @property
    def name(self) -> str:
        return self.entity.value

    @property
    def sql_name(self) -> str:
        return f'"{self.name}"'


TABLES: dict[EntityKind, Table] = {
    EntityKind.MIGRATION_HISTORY: Table(
        EntityKind.MIGRATION_HISTORY,
        key=("version",),
        columns=("version", "created_ts"),
        order_by="created_ts",
    ),
    EntityKind.SYSTEM_SETTING: Table(
        EntityKind.SYSTEM_SETTING,
        key=("name",),
        columns=("name", "value", "description"),
        order_by="name",
    ),
    EntityKind.USER: Table(
        EntityKind.USER,
        key=("id",),
        columns=(
            "id", "created_ts", "updated_ts", "row_status", "username", "role",
            "email", "nickname", "password_hash", "avatar_url", "description",
        ),
        # Role changes go through auth.service, not self-service updates
        immutable=("created_ts", "role"),
        autoincrement=True,
        touch=True,
        order_by="id",
    ),
    EntityKind.USER_SETTING: Table(
        EntityKind.USER_SETTING,
        key=("user_id", "key"),
        columns=("user_id", "key", "value"),
        order_by="key",
    ),
    EntityKind.MEMO: Table(
        EntityKind.MEMO,
        key=("id",),
        columns=(
            "id", "uid", "creator_id", "created_ts", "updated_ts", "row_status",
            "content", "visibility", "pinned", "payload",
        ),
        immutable=("uid", "creator_id", "created_ts"),
        autoincrement=True,
        touch=True,
        order_by="created_ts DESC, id DESC",
    ),
    EntityKind.MEMO_ORGANIZER: Table(
        EntityKind.MEMO_ORGANIZER,
        key=("memo_id", "user_id"),
        columns=("memo_id", "user_id", "pinned"),
    ),
    EntityKind.MEMO_RELATION: Table(
        EntityKind.MEMO_RELATION,
        key=("memo_id", "related_memo_id", "type"),
        columns=("memo_id", "related_memo_id", "type"),
    ),
    EntityKind.RESOURCE: Table(
        EntityKind.RESOURCE,
        key=("id",),
        columns=(
            "id", "uid", "creator_id", "created_ts", "updated_ts", "filename",
            "blob", "type", "size", "memo_id", "storage_type", "reference", "payload",
        ),
        immutable=("uid", "creator_id", "created_ts"),
        autoincrement=True,
        touch=True,
        order_by="created_ts DESC, id DESC",
    ),
    EntityKind.ACTIVITY: Table(
        EntityKind.ACTIVITY,
        key=("id",),
        columns=("id", "creator_id", "created_ts", "type", "level", "payload"),
        immutable=("creator_id", "created_ts"),
        autoincrement=True,
        order_by="created_ts DESC, id DESC",
    ),
    EntityKind.IDENTITY_PROVIDER: Table(
        EntityKind.IDENTITY_PROVIDER,
        key=("id",),
        columns=("id", "name", "type", "identifier_filter", "config"),
        autoincrement=True,
        order_by="id",
    ),
    EntityKind.INBOX: Table(
        EntityKind.INBOX,
        key=("id",),
        columns=("id", "created_ts", "sender_id", "receiver_id", "status", "message"),
        immutable=("sender_id", "receiver_id", "created_ts"),
        autoincrement=True,
        order_by="created_ts DESC, id DESC",
    ),
    EntityKind.REACTION: Table(
        EntityKind.REACTION,
        key=("id",),
        columns=("id", "created_ts", "creator_id", "content_id", "reaction_type"),
        immutable=("creator_id", "created_ts"),
        autoincrement=True,
        order_by="created_ts, id",
    ),
}
