"""Inbox endpoints.

- GET   /api/v1/inbox         - Messages the caller sent or received
- POST  /api/v1/inbox         - Send a message as the caller
- PATCH /api/v1/inbox/{id}    - Change status (receiver only)
"""

from flask import Blueprint, jsonify, request

from ...access.context import current_identity
from ...db import get_core
from ...exceptions import ValidationError
from ...schema.types import InboxStatus
from ..validation import validate_request
from .schemas import InboxCreate, InboxResponse, InboxUpdate

inbox_bp = Blueprint("inbox", __name__, url_prefix="/inbox")


@inbox_bp.get("")
def list_inbox():
    """
    Query Parameters:
        - status: UNREAD | ARCHIVED
    """
    status = request.args.get("status")
    if status is not None and status not in InboxStatus.__members__:
        raise ValidationError("Invalid status", {"status": status})

    core = get_core(current_identity())
    try:
        rows = core.inbox.list_messages(status=InboxStatus(status) if status else None)
        return jsonify([InboxResponse.from_row(row).model_dump() for row in rows])
    finally:
        core.close()


@inbox_bp.post("")
@validate_request
def send_message(data: InboxCreate):
    """
    Returns:
        201: InboxResponse
        400: Unknown receiver
    """
    core = get_core(current_identity())
    try:
        row = core.inbox.send(data.receiver_id, data.message)
        return jsonify(InboxResponse.from_row(row).model_dump()), 201
    finally:
        core.close()


@inbox_bp.patch("/<int:inbox_id>")
@validate_request
def update_message(inbox_id: int, data: InboxUpdate):
    """
    Returns:
        200: InboxResponse
        403: Caller is the sender, not the receiver
        404: Message not found or caller is neither party
    """
    core = get_core(current_identity())
    try:
        row = core.inbox.set_status(inbox_id, data.status)
        return jsonify(InboxResponse.from_row(row).model_dump())
    finally:
        core.close()
