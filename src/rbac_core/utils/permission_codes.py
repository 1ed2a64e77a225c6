"""Permission code helpers.

A canonical permission code is ``lower(resource):lower(action)``, for
example ``expense_claim:approve``. Catalog codes may use hyphens in the
resource part and may carry a trailing scope (``expense-claim:read:all``);
both forms parse to the same resource and action.
"""

from typing import NamedTuple

from rbac_core.exceptions import InvalidPermissionCodeError
from rbac_core.models.domain.enums import Action, Resource, Scope


class ParsedPermissionCode(NamedTuple):
    """Resource, action and optional scope extracted from a code."""

    resource: Resource
    action: Action
    scope: Scope | None = None


def permission_code(resource: Resource | str, action: Action | str) -> str:
    """Build the canonical code for a resource/action pair.

    Args:
        resource: Resource tag
        action: Action tag

    Returns:
        Lower-case ``resource:action`` code
    """
    return f"{str(resource).lower()}:{str(action).lower()}"


def parse_permission_code(code: str) -> ParsedPermissionCode:
    """Parse a permission code into its parts.

    Args:
        code: Code such as ``user:read`` or ``expense-claim:approve:department``

    Returns:
        ParsedPermissionCode with enum members

    Raises:
        InvalidPermissionCodeError: If the code is malformed or names an
            unknown resource, action or scope
    """
    parts = code.strip().split(":") if code else []
    if len(parts) not in (2, 3) or not all(parts):
        raise InvalidPermissionCodeError(code)

    resource_tag = parts[0].replace("-", "_").upper()
    action_tag = parts[1].upper()
    try:
        resource = Resource(resource_tag)
        action = Action(action_tag)
        scope = Scope(parts[2].upper()) if len(parts) == 3 else None
    except ValueError as e:
        raise InvalidPermissionCodeError(code) from e

    return ParsedPermissionCode(resource, action, scope)
