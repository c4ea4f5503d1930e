"""Schema module for memos-core.

schema.sql is the source of truth for the persisted data model; types holds
the enumerations its CHECK constraints allow.
"""

from . import types

__all__ = ["types"]
