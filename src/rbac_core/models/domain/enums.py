"""Authorization vocabulary: resources, actions and scopes."""

from enum import StrEnum


class Resource(StrEnum):
    """Resources a permission can apply to."""

    USER = "USER"
    DEPARTMENT = "DEPARTMENT"
    ROLE = "ROLE"
    PERMISSION = "PERMISSION"
    EXPENSE_CLAIM = "EXPENSE_CLAIM"
    OFF_SITE_WORK = "OFF_SITE_WORK"
    MONTHLY_REQUEST = "MONTHLY_REQUEST"
    SIGNATURE = "SIGNATURE"
    FILE = "FILE"
    ACTION_LOG = "ACTION_LOG"
    SYSTEM = "SYSTEM"


class Action(StrEnum):
    """Actions a permission can allow.

    MANAGE is a wildcard: holding (resource, MANAGE) implies every action
    on that resource.
    """

    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LIST = "LIST"
    EXPORT = "EXPORT"
    IMPORT = "IMPORT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    SUBMIT = "SUBMIT"
    CANCEL = "CANCEL"
    MANAGE = "MANAGE"


class Scope(StrEnum):
    """How far a permission reaches."""

    OWN = "OWN"
    DEPARTMENT = "DEPARTMENT"
    ALL = "ALL"

    @property
    def priority(self) -> int:
        """Breadth of the scope; higher wins when several permissions match."""
        return SCOPE_PRIORITY[self]


SCOPE_PRIORITY: dict[Scope, int] = {
    Scope.OWN: 1,
    Scope.DEPARTMENT: 2,
    Scope.ALL: 3,
}
