"""Custom exceptions for memos-core.

Each exception carries a human-readable message and an optional details
dict; the Flask error handlers in main.py render both as JSON.
"""


class MemosError(Exception):
    """Base exception for all memos-core errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ResourceNotFound(MemosError):
    """Row does not exist or is not visible to the acting identity."""


class ValidationError(MemosError):
    """Request data failed validation."""


class DatabaseError(MemosError):
    """Storage operation failed."""


class AuthenticationError(MemosError):
    """Missing or invalid credentials."""


class PermissionDenied(MemosError):
    """Acting identity is not allowed to perform a write."""
