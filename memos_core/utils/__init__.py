"""Utility functions for memos-core.

Import convention: use module-level imports for clarity.

    from ..utils import timestamp, uid
    created = timestamp.now()
    memo_uid = uid.generate_uid()
"""

from . import timestamp, uid

__all__ = ["timestamp", "uid"]
