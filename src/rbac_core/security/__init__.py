"""Security package.

Request guards live in :mod:`rbac_core.security.guards`; they depend on
the service layer and are imported from there directly.
"""

from rbac_core.security.permission_evaluator import evaluate, find_match, has_capability

__all__ = [
    "evaluate",
    "find_match",
    "has_capability",
]
