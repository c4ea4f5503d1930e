"""User endpoints.

- GET   /api/v1/users             - List users
- GET   /api/v1/users/{id}        - Get user
- PATCH /api/v1/users/{id}        - Update own profile
- PUT   /api/v1/users/{id}/role   - Change a user's role (HOST only)
"""

import logging

from flask import Blueprint, jsonify

from ...access import EntityKind
from ...access.context import current_identity
from ...auth import service
from ...auth.decorators import role_required
from ...db import get_core
from ...exceptions import PermissionDenied, ResourceNotFound
from ...schema.types import Role
from ..validation import validate_request
from .schemas import RoleUpdate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__, url_prefix="/users")


def _user_response(row) -> dict:
    return UserResponse(**{name: row[name] for name in UserResponse.model_fields}).model_dump()


@users_bp.get("")
def list_users():
    core = get_core(current_identity())
    try:
        rows = core.rows(EntityKind.USER).list(limit=1000)
        return jsonify([_user_response(row) for row in rows])
    finally:
        core.close()


@users_bp.get("/<int:user_id>")
def get_user(user_id: int):
    core = get_core(current_identity())
    try:
        return jsonify(_user_response(core.rows(EntityKind.USER).get(id=user_id)))
    finally:
        core.close()


@users_bp.patch("/<int:user_id>")
@validate_request
def update_user(user_id: int, data: UserUpdate):
    """
    Returns:
        200: UserResponse
        403: Updating someone else's profile
        404: User not found
    """
    core = get_core(current_identity())
    try:
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        row = core.rows(EntityKind.USER).update({"id": user_id}, changes)
        return jsonify(_user_response(row))
    finally:
        core.close()


@users_bp.put("/<int:user_id>/role")
@role_required(Role.HOST)
@validate_request
def set_user_role(user_id: int, data: RoleUpdate):
    """Grant or revoke ADMIN. The HOST role is never assigned or taken away."""
    core = get_core(current_identity())
    try:
        if data.role is Role.HOST:
            raise PermissionDenied("HOST role cannot be assigned")
        target = service.get_user_by_id(core._conn, user_id)
        if target is None:
            raise ResourceNotFound(f"User '{user_id}' not found", {"user_id": user_id})
        if target.role == Role.HOST.value:
            logger.warning(f"Refused role change of HOST user {user_id}")
            raise PermissionDenied("HOST role cannot be changed", {"user_id": user_id})
        user = service.set_role(core._conn, user_id, data.role)
        core._conn.commit()
        logger.info(f"User {user_id} role set to {data.role.value}")
        return jsonify(user.model_dump())
    finally:
        core.close()
