"""API v1 endpoints for memos-core.

The ApiV1 blueprint aggregates all v1 resources:
- Memos (with organizer and relations)
- Inbox
- Reactions
- Users
- Settings

Every v1 endpoint requires authentication; handlers then pass
current_identity() to get_core(), where the row rules are enforced.
"""

from flask import Blueprint

from ...auth.decorators import _authenticate_request
from . import inbox, memos, reactions, settings, users

api_v1_bp = Blueprint("api_v1", __name__)


@api_v1_bp.before_request
def authenticate():
    """
    Require authentication for all API v1 endpoints.

    Raises:
        AuthenticationError: If no valid token provided
    """
    _authenticate_request()


api_v1_bp.register_blueprint(memos.memos_bp)
api_v1_bp.register_blueprint(inbox.inbox_bp)
api_v1_bp.register_blueprint(reactions.reactions_bp)
api_v1_bp.register_blueprint(users.users_bp)
api_v1_bp.register_blueprint(settings.settings_bp)

__all__ = ["api_v1_bp"]
