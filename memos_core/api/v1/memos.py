"""Memo endpoints.

- POST   /api/v1/memos                        - Create memo (owned by caller)
- GET    /api/v1/memos                        - List memos visible to caller
- GET    /api/v1/memos/{uid}                  - Get memo
- PATCH  /api/v1/memos/{uid}                  - Update memo (creator only)
- DELETE /api/v1/memos/{uid}                  - Delete memo (creator only)
- PUT    /api/v1/memos/{uid}/organizer        - Pin/unpin for caller
- GET    /api/v1/memos/{uid}/relations        - List relations
- POST   /api/v1/memos/{uid}/relations        - Relate to another memo

Memos the caller cannot see are reported as 404, never 403.
"""

from flask import Blueprint, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from ...access.context import current_identity
from ...db import get_core
from ...exceptions import ValidationError
from ..validation import validate_request
from .schemas import MemoCreate, MemoResponse, MemoUpdate, OrganizerUpdate, RelationCreate, RelationResponse

memos_bp = Blueprint("memos", __name__, url_prefix="/memos")


def _memo_response(core, row) -> dict:
    organizer = core.memo.get_organizer(row["uid"])
    pinned = bool(organizer["pinned"]) if organizer is not None else None
    return MemoResponse.from_row(row, pinned=pinned).model_dump()


def _int_arg(name: str, default: int | None = None) -> int | None:
    value = request.args.get(name)
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Query parameter '{name}' must be an integer", {name: value})
    if number < 0:
        raise ValidationError(f"Query parameter '{name}' must not be negative", {name: value})
    return number


@memos_bp.post("")
@validate_request
def create_memo(data: MemoCreate):
    """
    Create a memo owned by the caller.

    Returns:
        201: MemoResponse
        400: Validation error
    """
    core = get_core(current_identity())
    try:
        row = core.memo.create(data.content, visibility=data.visibility, payload=data.payload)
        return jsonify(_memo_response(core, row)), 201
    finally:
        core.close()


@memos_bp.get("")
def list_memos():
    """
    List memos the caller can see: their own plus everyone's PUBLIC memos.

    Query Parameters:
        - creator_id: int - Only memos by this user
        - visibility: PUBLIC | PROTECTED | PRIVATE
        - row_status: NORMAL (default) | ARCHIVED
        - limit: int (default 100)
        - offset: int (default 0)
    """
    try:
        filters = MemoUpdate(
            visibility=request.args.get("visibility"),
            row_status=request.args.get("row_status", "NORMAL"),
        )
    except PydanticValidationError as e:
        raise ValidationError("Invalid filter", {"reason": str(e)})

    core = get_core(current_identity())
    try:
        rows = core.memo.list_memos(
            creator_id=_int_arg("creator_id"),
            visibility=filters.visibility,
            row_status=filters.row_status,
            limit=_int_arg("limit", 100),
            offset=_int_arg("offset", 0),
        )
        return jsonify([_memo_response(core, row) for row in rows])
    finally:
        core.close()


@memos_bp.get("/<memo_uid>")
def get_memo(memo_uid: str):
    """
    Returns:
        200: MemoResponse
        404: Memo not found or not visible
    """
    core = get_core(current_identity())
    try:
        return jsonify(_memo_response(core, core.memo.get_by_uid(memo_uid)))
    finally:
        core.close()


@memos_bp.patch("/<memo_uid>")
@validate_request
def update_memo(memo_uid: str, data: MemoUpdate):
    """
    Partially update a memo.

    Returns:
        200: MemoResponse
        403: Caller can see the memo but does not own it
        404: Memo not found or not visible
    """
    core = get_core(current_identity())
    try:
        row = core.memo.update_by_uid(memo_uid, data.model_dump(exclude_unset=True))
        return jsonify(_memo_response(core, row))
    finally:
        core.close()


@memos_bp.delete("/<memo_uid>")
def delete_memo(memo_uid: str):
    """
    Returns:
        204: Deleted
        403: Caller can see the memo but does not own it
        404: Memo not found or not visible
    """
    core = get_core(current_identity())
    try:
        core.memo.delete_by_uid(memo_uid)
    finally:
        core.close()
    return "", 204


@memos_bp.put("/<memo_uid>/organizer")
@validate_request
def set_organizer(memo_uid: str, data: OrganizerUpdate):
    """Pin or unpin a visible memo for the caller only."""
    core = get_core(current_identity())
    try:
        core.memo.set_pinned(memo_uid, data.pinned)
        return jsonify(_memo_response(core, core.memo.get_by_uid(memo_uid)))
    finally:
        core.close()


@memos_bp.get("/<memo_uid>/relations")
def list_relations(memo_uid: str):
    core = get_core(current_identity())
    try:
        rows = core.memo.list_relations(memo_uid)
        return jsonify([RelationResponse(**dict(row)).model_dump() for row in rows])
    finally:
        core.close()


@memos_bp.post("/<memo_uid>/relations")
@validate_request
def create_relation(memo_uid: str, data: RelationCreate):
    """
    Relate two memos. Both must be visible to the caller.

    Returns:
        201: RelationResponse
        404: Either memo not found or not visible
    """
    core = get_core(current_identity())
    try:
        row = core.memo.relate(memo_uid, data.related_memo_uid, data.type)
        return jsonify(RelationResponse(**dict(row)).model_dump()), 201
    finally:
        core.close()
