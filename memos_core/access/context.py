"""Identity context accessor for the HTTP layer.

The authentication layer stores the acting Identity on flask.g. Handlers
read it here and pass it explicitly to get_core() and authorize(); nothing
below the HTTP layer reads request state.
"""

from flask import g, has_app_context

from ..schema.types import Role
from .policy import Identity


def set_identity(user_id: int, role: Role | str) -> Identity:
    """Record the acting identity for the current request."""
    identity = Identity(user_id=user_id, role=Role(role))
    g.identity = identity
    return identity


def current_identity() -> Identity | None:
    """Return the acting identity, or None for anonymous access."""
    if not has_app_context():
        return None
    return g.get("identity")
