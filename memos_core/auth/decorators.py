"""Authentication decorators for protected endpoints.

- @auth_required - Requires a valid JWT bearer token
- @role_required(role) - Requires auth plus a minimum role

Both store the acting Identity via access.context.set_identity, where
handlers read it with current_identity() and pass it on explicitly.
"""

import logging
from functools import wraps

import jwt
from flask import g, request

from ..access.context import current_identity, set_identity
from ..db import get_core
from ..exceptions import AuthenticationError, PermissionDenied
from ..schema.types import Role, RowStatus
from . import service, token

logger = logging.getLogger(__name__)


# ============================================================================
# Shared Authentication Logic
# ============================================================================


def _authenticate_request():
    """
    Resolve the acting identity from `Authorization: Bearer <token>`.

    Stores on flask.g:
    - g.identity: Identity(user_id, role)
    - g.username: Username

    Raises:
        AuthenticationError: If no valid token is provided, or the user
            behind it no longer exists or is archived

    Called by @auth_required and by the ApiV1 blueprint's before_request.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        logger.warning("Unauthenticated request to protected endpoint")
        raise AuthenticationError("Authentication required", {"code": "missing_auth"})

    token_str = auth_header[7:]
    try:
        payload = token.validate_access_token(token_str)
        user_id = int(payload.sub)
    except jwt.ExpiredSignatureError:
        logger.warning("JWT token expired")
        raise AuthenticationError("Token has expired", {"code": "token_expired"})
    except (jwt.InvalidTokenError, ValueError) as e:
        logger.warning(f"Invalid JWT token: {e}")
        raise AuthenticationError("Invalid token", {"code": "invalid_token"})

    # Role and status come from the stored user, not the token claims
    core = get_core()
    try:
        user = service.get_user_by_id(core._conn, user_id)
    finally:
        core.close()

    if user is None or user.row_status != RowStatus.NORMAL.value:
        logger.warning(f"Token for missing or inactive user {user_id}")
        raise AuthenticationError("User is not active", {"code": "inactive_user"})

    set_identity(user.id, user.role)
    g.username = user.username
    logger.debug(f"JWT authentication successful for user {user.username}")


def auth_required(f):
    """
    Decorator to require authentication for endpoint access.

    Example:
    ```python
    @auth_required
    def protected_endpoint():
        core = get_core(current_identity())
        ...
    ```
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        _authenticate_request()
        return f(*args, **kwargs)

    return wrapper


def role_required(role: Role):
    """
    Decorator factory requiring authentication and at least `role`.

    Raises:
        AuthenticationError: If not authenticated
        PermissionDenied: If the acting role is below `role`
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            _authenticate_request()
            identity = current_identity()
            if not identity.role.satisfies(role):
                logger.warning(
                    f"User {identity.user_id} ({identity.role.value}) "
                    f"denied {role.value}-only endpoint"
                )
                raise PermissionDenied(
                    f"{role.value} role required", {"role": identity.role.value}
                )
            return f(*args, **kwargs)

        return wrapper

    return decorator
