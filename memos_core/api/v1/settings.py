"""Setting endpoints.

- GET /api/v1/settings/system          - All system settings
- PUT /api/v1/settings/system/{name}   - Set a system setting (ADMIN or HOST)
- GET /api/v1/settings/user            - Caller's settings
- PUT /api/v1/settings/user/{key}      - Set one of the caller's settings
"""

from flask import Blueprint, jsonify

from ...access import EntityKind
from ...access.context import current_identity
from ...db import get_core
from ..validation import validate_request
from .schemas import SystemSettingResponse, SystemSettingUpdate, UserSettingResponse, UserSettingUpdate

settings_bp = Blueprint("settings", __name__, url_prefix="/settings")


@settings_bp.get("/system")
def list_system_settings():
    core = get_core(current_identity())
    try:
        rows = core.rows(EntityKind.SYSTEM_SETTING).list(limit=1000)
        return jsonify([SystemSettingResponse(**dict(row)).model_dump() for row in rows])
    finally:
        core.close()


@settings_bp.put("/system/<name>")
@validate_request
def put_system_setting(name: str, data: SystemSettingUpdate):
    """
    Returns:
        200: SystemSettingResponse
        403: Caller is not ADMIN or HOST
    """
    core = get_core(current_identity())
    try:
        row = core.rows(EntityKind.SYSTEM_SETTING).upsert({
            "name": name,
            "value": data.value,
            "description": data.description,
        })
        return jsonify(SystemSettingResponse(**dict(row)).model_dump())
    finally:
        core.close()


@settings_bp.get("/user")
def list_user_settings():
    identity = current_identity()
    core = get_core(identity)
    try:
        rows = core.rows(EntityKind.USER_SETTING).list({"user_id": identity.user_id}, limit=1000)
        return jsonify([UserSettingResponse(**dict(row)).model_dump() for row in rows])
    finally:
        core.close()


@settings_bp.put("/user/<key>")
@validate_request
def put_user_setting(key: str, data: UserSettingUpdate):
    identity = current_identity()
    core = get_core(identity)
    try:
        row = core.rows(EntityKind.USER_SETTING).upsert({
            "user_id": identity.user_id,
            "key": key,
            "value": data.value,
        })
        return jsonify(UserSettingResponse(**dict(row)).model_dump())
    finally:
        core.close()
