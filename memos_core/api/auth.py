"""Authentication endpoints for memos-core.

- POST /auth/signup - Create an account. The first account becomes HOST;
  later accounts are USER and need settings.allow_signup.
- POST /auth/login - Authenticate and return a JWT token
- GET /auth/me - Current user info
"""

import logging
import sqlite3

from flask import Blueprint, jsonify

from ..access.context import current_identity
from ..auth import service, token
from ..auth.decorators import auth_required
from ..auth.schemas import TokenResponse, UserCreate, UserLogin
from ..config import settings
from ..db import get_core
from ..exceptions import AuthenticationError, PermissionDenied, ValidationError
from ..schema.types import Role
from .validation import validate_request

logger = logging.getLogger(__name__)


auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/auth/signup")
@validate_request
def signup(data: UserCreate):
    """
    Create an account and return a token for it.

    Returns:
        201: TokenResponse
        400: Validation error or username taken
        403: Signup disabled and a host already exists
    """
    # Host check and insert run in one write transaction
    with get_core(atomic=True) as core:
        core._conn.execute("BEGIN IMMEDIATE")
        is_first = not service.has_host_user(core._conn)
        if not is_first and not settings.allow_signup:
            logger.warning(f"Signup attempted while disabled: {data.username}")
            raise PermissionDenied("Signup is disabled")

        role = Role.HOST if is_first else Role.USER
        try:
            user = service.create_user(core._conn, data, role=role)
        except sqlite3.IntegrityError:
            logger.warning(f"Signup failed (username exists): {data.username}")
            raise ValidationError("Username already exists", {"username": data.username})

    return jsonify(
        TokenResponse(access_token=token.generate_access_token(user), user=user).model_dump()
    ), 201


@auth_bp.post("/auth/login")
@validate_request
def login(data: UserLogin):
    """
    Authenticate user and return JWT token.

    Returns:
        200: TokenResponse
        401: Invalid credentials
    """
    core = get_core()
    try:
        user = service.verify_credentials(core._conn, data.username, data.password)
    finally:
        core.close()

    if user is None:
        logger.warning(f"Failed login attempt for username: {data.username}")
        raise AuthenticationError("Invalid username or password", {"username": data.username})

    logger.info(f"Successful login: {user.username}")
    return jsonify(
        TokenResponse(access_token=token.generate_access_token(user), user=user).model_dump()
    ), 200


@auth_bp.get("/auth/me")
@auth_required
def get_current_user():
    """
    Get the authenticated user.

    Returns:
        200: UserResponse
        401: Missing/invalid token or the account no longer exists
    """
    identity = current_identity()
    core = get_core(identity)
    try:
        user = service.get_user_by_id(core._conn, identity.user_id)
    finally:
        core.close()

    if user is None:
        raise AuthenticationError("User not found", {"user_id": identity.user_id})
    return jsonify(user.model_dump()), 200
