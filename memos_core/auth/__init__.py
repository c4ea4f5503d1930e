"""Authentication module for memos-core.

- Schema validation for auth operations
- JWT token generation and validation
- Password hashing and verification
- Authentication decorators for protected endpoints

Auth endpoints (top-level routes, not under /api/v1/):
- POST /auth/signup - Create an account (first account becomes HOST)
- POST /auth/login - Authenticate and return JWT token
- GET /auth/me - Get current user info
"""

from . import schemas, token

__all__ = ["schemas", "token"]
