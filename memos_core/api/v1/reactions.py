"""Reaction endpoints.

- GET    /api/v1/reactions?content_id=...  - Reactions on a piece of content
- POST   /api/v1/reactions                 - React as the caller
- DELETE /api/v1/reactions/{id}            - Remove own reaction
"""

from flask import Blueprint, jsonify, request

from ...access.context import current_identity
from ...db import get_core
from ...exceptions import ValidationError
from ..validation import validate_request
from .schemas import ReactionCreate, ReactionResponse

reactions_bp = Blueprint("reactions", __name__, url_prefix="/reactions")


@reactions_bp.get("")
def list_reactions():
    content_id = request.args.get("content_id")
    if not content_id:
        raise ValidationError("content_id query parameter is required")

    core = get_core(current_identity())
    try:
        rows = core.reaction.list_for_content(content_id)
        return jsonify([ReactionResponse.from_row(row).model_dump() for row in rows])
    finally:
        core.close()


@reactions_bp.post("")
@validate_request
def add_reaction(data: ReactionCreate):
    """
    Returns:
        201: ReactionResponse
        400: Caller already reacted with this type
    """
    core = get_core(current_identity())
    try:
        row = core.reaction.add(data.content_id, data.reaction_type)
        return jsonify(ReactionResponse.from_row(row).model_dump()), 201
    finally:
        core.close()


@reactions_bp.delete("/<int:reaction_id>")
def delete_reaction(reaction_id: int):
    """
    Returns:
        204: Removed
        403: Reaction belongs to someone else
        404: Reaction not found
    """
    core = get_core(current_identity())
    try:
        core.reaction.remove(reaction_id)
    finally:
        core.close()
    return "", 204
