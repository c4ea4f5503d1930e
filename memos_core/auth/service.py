"""User account service: password hashing and user lookup.

Account creation happens before any identity exists, so it writes the user
table directly instead of going through the guarded row operations (there
is no INSERT rule for users). Everything else about users goes through
core.rows(EntityKind.USER).
"""

import logging
import sqlite3

import bcrypt

from ..config import settings
from ..exceptions import ResourceNotFound
from ..schema.types import Role
from ..utils import timestamp
from .schemas import UserCreate, UserResponse

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt using the configured work factor."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_work_factor)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def _row_to_user(row: sqlite3.Row) -> UserResponse:
    return UserResponse(
        id=row["id"],
        username=row["username"],
        role=row["role"],
        nickname=row["nickname"],
        email=row["email"],
        avatar_url=row["avatar_url"],
        description=row["description"],
        row_status=row["row_status"],
        created_ts=row["created_ts"],
        updated_ts=row["updated_ts"],
    )


def has_host_user(conn: sqlite3.Connection) -> bool:
    row = conn.execute(
        "SELECT 1 FROM \"user\" WHERE role = ? LIMIT 1", (Role.HOST.value,)
    ).fetchone()
    return row is not None


def create_user(conn: sqlite3.Connection, data: UserCreate, role: Role = Role.USER) -> UserResponse:
    """Create a user account. Caller commits.

    Raises:
        sqlite3.IntegrityError: If the username is taken
    """
    now = timestamp.now()
    cursor = conn.execute(
        """INSERT INTO "user"
           (username, role, email, nickname, password_hash, created_ts, updated_ts)
           VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (data.username, Role(role).value, data.email, data.nickname,
         hash_password(data.password), now, now)
    )
    user = get_user_by_id(conn, cursor.lastrowid)
    logger.info(f"Created {Role(role).value} account: {data.username}")
    return user


def get_user_by_id(conn: sqlite3.Connection, user_id: int) -> UserResponse | None:
    row = conn.execute("SELECT * FROM \"user\" WHERE id = ?", (user_id,)).fetchone()
    return _row_to_user(row) if row else None


def verify_credentials(conn: sqlite3.Connection, username: str, password: str) -> UserResponse | None:
    """Return the user if the password matches and the account is active."""
    row = conn.execute(
        "SELECT * FROM \"user\" WHERE username = ?", (username.lower(),)
    ).fetchone()
    if row is None or row["row_status"] != "NORMAL":
        return None
    if not verify_password(password, row["password_hash"]):
        return None
    return _row_to_user(row)


def set_role(conn: sqlite3.Connection, user_id: int, role: Role) -> UserResponse:
    """Change a user's role. Callers must have checked the actor is HOST.

    Raises:
        ResourceNotFound: If the user doesn't exist
    """
    cursor = conn.execute(
        "UPDATE \"user\" SET role = ?, updated_ts = ? WHERE id = ?",
        (Role(role).value, timestamp.now(), user_id)
    )
    if cursor.rowcount == 0:
        raise ResourceNotFound(f"User '{user_id}' not found", {"user_id": user_id})
    return get_user_by_id(conn, user_id)
