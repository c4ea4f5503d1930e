"""Row-level access control for memos-core.

Every read and write of a persisted row goes through authorize() with the
acting identity passed explicitly. The evaluator is a pure function: no
state, no I/O, safe to call from any thread.
"""

from .policy import (
    Decision,
    EntityKind,
    Identity,
    Operation,
    Policy,
    RowView,
    authorize,
    ensure_allowed,
    filter_visible,
    policies_for,
)

__all__ = [
    "Decision",
    "EntityKind",
    "Identity",
    "Operation",
    "Policy",
    "RowView",
    "authorize",
    "ensure_allowed",
    "filter_visible",
    "policies_for",
]
