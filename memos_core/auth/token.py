"""JWT access tokens (HS256) carrying the user id and role."""

from datetime import datetime, timedelta, UTC

import jwt

from ..config import settings
from ..schema.types import Role
from .schemas import TokenPayload, UserResponse

ALGORITHM = "HS256"


def generate_access_token(user: UserResponse) -> str:
    """Issue a signed access token for `user`."""
    now = datetime.now(UTC)
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "role": Role(user.role).value,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=settings.jwt_expiry_days)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def validate_access_token(token: str) -> TokenPayload:
    """Verify signature and expiry and return the claims.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the token is malformed or the signature is wrong
    """
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[ALGORITHM])
    return TokenPayload(**payload)
