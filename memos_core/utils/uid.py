"""Public identifier generation.

Memos and resources carry a `uid` that is exposed in URLs, independent of
their integer primary key. This is the ONLY module that should import uuid4.
"""

from uuid import uuid4


def generate_uid() -> str:
    """Generate a random 32-character hex identifier."""
    return uuid4().hex
