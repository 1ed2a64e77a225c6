"""Default permission catalog, system roles and their grants.

Seeded by SeedService on first setup. Codes use the catalog form
``resource:action[:scope]``; every entry is a system permission.
"""

from typing import Final

from rbac_core.models.domain.enums import Action, Resource, Scope

# (code, name, resource, action, scope)
PermissionSeed = tuple[str, str, Resource, Action, Scope]

# =============================================================================
# Permissions
# =============================================================================

DEFAULT_PERMISSIONS: Final[tuple[PermissionSeed, ...]] = (
    # Users
    ("user:create", "Create Users", Resource.USER, Action.CREATE, Scope.ALL),
    ("user:read", "Read Users", Resource.USER, Action.READ, Scope.OWN),
    ("user:read:all", "Read All Users", Resource.USER, Action.READ, Scope.ALL),
    ("user:read:department", "Read Department Users", Resource.USER, Action.READ, Scope.DEPARTMENT),
    ("user:update", "Update Own Profile", Resource.USER, Action.UPDATE, Scope.OWN),
    ("user:update:all", "Update Any User", Resource.USER, Action.UPDATE, Scope.ALL),
    ("user:delete", "Delete Users", Resource.USER, Action.DELETE, Scope.ALL),
    ("user:list", "List Users", Resource.USER, Action.LIST, Scope.ALL),
    ("user:manage", "Manage Users", Resource.USER, Action.MANAGE, Scope.ALL),
    # Departments
    ("department:create", "Create Departments", Resource.DEPARTMENT, Action.CREATE, Scope.ALL),
    ("department:read", "Read Departments", Resource.DEPARTMENT, Action.READ, Scope.ALL),
    ("department:update", "Update Departments", Resource.DEPARTMENT, Action.UPDATE, Scope.ALL),
    ("department:delete", "Delete Departments", Resource.DEPARTMENT, Action.DELETE, Scope.ALL),
    ("department:list", "List Departments", Resource.DEPARTMENT, Action.LIST, Scope.ALL),
    ("department:manage", "Manage Departments", Resource.DEPARTMENT, Action.MANAGE, Scope.ALL),
    # Roles and permissions
    ("role:create", "Create Roles", Resource.ROLE, Action.CREATE, Scope.ALL),
    ("role:read", "Read Roles", Resource.ROLE, Action.READ, Scope.ALL),
    ("role:update", "Update Roles", Resource.ROLE, Action.UPDATE, Scope.ALL),
    ("role:delete", "Delete Roles", Resource.ROLE, Action.DELETE, Scope.ALL),
    ("role:list", "List Roles", Resource.ROLE, Action.LIST, Scope.ALL),
    ("role:manage", "Manage Roles", Resource.ROLE, Action.MANAGE, Scope.ALL),
    ("permission:read", "Read Permissions", Resource.PERMISSION, Action.READ, Scope.ALL),
    ("permission:list", "List Permissions", Resource.PERMISSION, Action.LIST, Scope.ALL),
    ("permission:manage", "Manage Permissions", Resource.PERMISSION, Action.MANAGE, Scope.ALL),
    # Expense claims
    ("expense-claim:create", "Create Expense Claims", Resource.EXPENSE_CLAIM, Action.CREATE, Scope.OWN),
    ("expense-claim:read", "Read Own Expense Claims", Resource.EXPENSE_CLAIM, Action.READ, Scope.OWN),
    ("expense-claim:read:department", "Read Department Expense Claims", Resource.EXPENSE_CLAIM, Action.READ, Scope.DEPARTMENT),
    ("expense-claim:read:all", "Read All Expense Claims", Resource.EXPENSE_CLAIM, Action.READ, Scope.ALL),
    ("expense-claim:update", "Update Own Expense Claims", Resource.EXPENSE_CLAIM, Action.UPDATE, Scope.OWN),
    ("expense-claim:update:all", "Update Any Expense Claim", Resource.EXPENSE_CLAIM, Action.UPDATE, Scope.ALL),
    ("expense-claim:delete", "Delete Own Expense Claims", Resource.EXPENSE_CLAIM, Action.DELETE, Scope.OWN),
    ("expense-claim:delete:all", "Delete Any Expense Claim", Resource.EXPENSE_CLAIM, Action.DELETE, Scope.ALL),
    ("expense-claim:list", "List Own Expense Claims", Resource.EXPENSE_CLAIM, Action.LIST, Scope.OWN),
    ("expense-claim:list:department", "List Department Expense Claims", Resource.EXPENSE_CLAIM, Action.LIST, Scope.DEPARTMENT),
    ("expense-claim:list:all", "List All Expense Claims", Resource.EXPENSE_CLAIM, Action.LIST, Scope.ALL),
    ("expense-claim:submit", "Submit Expense Claims", Resource.EXPENSE_CLAIM, Action.SUBMIT, Scope.OWN),
    ("expense-claim:approve", "Approve Expense Claims", Resource.EXPENSE_CLAIM, Action.APPROVE, Scope.DEPARTMENT),
    ("expense-claim:approve:all", "Approve All Expense Claims", Resource.EXPENSE_CLAIM, Action.APPROVE, Scope.ALL),
    ("expense-claim:reject", "Reject Expense Claims", Resource.EXPENSE_CLAIM, Action.REJECT, Scope.DEPARTMENT),
    ("expense-claim:reject:all", "Reject All Expense Claims", Resource.EXPENSE_CLAIM, Action.REJECT, Scope.ALL),
    ("expense-claim:cancel", "Cancel Own Expense Claims", Resource.EXPENSE_CLAIM, Action.CANCEL, Scope.OWN),
    ("expense-claim:manage", "Manage Expense Claims", Resource.EXPENSE_CLAIM, Action.MANAGE, Scope.ALL),
    # Off-site work
    ("off-site-work:create", "Create Off-Site Work", Resource.OFF_SITE_WORK, Action.CREATE, Scope.OWN),
    ("off-site-work:read", "Read Own Off-Site Work", Resource.OFF_SITE_WORK, Action.READ, Scope.OWN),
    ("off-site-work:read:all", "Read All Off-Site Work", Resource.OFF_SITE_WORK, Action.READ, Scope.ALL),
    ("off-site-work:update", "Update Own Off-Site Work", Resource.OFF_SITE_WORK, Action.UPDATE, Scope.OWN),
    ("off-site-work:update:all", "Update Any Off-Site Work", Resource.OFF_SITE_WORK, Action.UPDATE, Scope.ALL),
    ("off-site-work:delete", "Delete Own Off-Site Work", Resource.OFF_SITE_WORK, Action.DELETE, Scope.OWN),
    ("off-site-work:delete:all", "Delete Any Off-Site Work", Resource.OFF_SITE_WORK, Action.DELETE, Scope.ALL),
    ("off-site-work:list", "List Off-Site Work", Resource.OFF_SITE_WORK, Action.LIST, Scope.OWN),
    ("off-site-work:list:all", "List All Off-Site Work", Resource.OFF_SITE_WORK, Action.LIST, Scope.ALL),
    ("off-site-work:manage", "Manage Off-Site Work", Resource.OFF_SITE_WORK, Action.MANAGE, Scope.ALL),
    # Monthly requests
    ("monthly-request:create", "Create Monthly Requests", Resource.MONTHLY_REQUEST, Action.CREATE, Scope.DEPARTMENT),
    ("monthly-request:read", "Read Monthly Requests", Resource.MONTHLY_REQUEST, Action.READ, Scope.DEPARTMENT),
    ("monthly-request:read:all", "Read All Monthly Requests", Resource.MONTHLY_REQUEST, Action.READ, Scope.ALL),
    ("monthly-request:update", "Update Monthly Requests", Resource.MONTHLY_REQUEST, Action.UPDATE, Scope.DEPARTMENT),
    ("monthly-request:submit", "Submit Monthly Requests", Resource.MONTHLY_REQUEST, Action.SUBMIT, Scope.DEPARTMENT),
    ("monthly-request:approve", "Approve Monthly Requests", Resource.MONTHLY_REQUEST, Action.APPROVE, Scope.ALL),
    ("monthly-request:manage", "Manage Monthly Requests", Resource.MONTHLY_REQUEST, Action.MANAGE, Scope.ALL),
    # Signatures
    ("signature:create", "Create Own Signature", Resource.SIGNATURE, Action.CREATE, Scope.OWN),
    ("signature:read", "Read Own Signature", Resource.SIGNATURE, Action.READ, Scope.OWN),
    ("signature:read:all", "Read All Signatures", Resource.SIGNATURE, Action.READ, Scope.ALL),
    ("signature:update", "Update Own Signature", Resource.SIGNATURE, Action.UPDATE, Scope.OWN),
    ("signature:delete", "Delete Own Signature", Resource.SIGNATURE, Action.DELETE, Scope.OWN),
    ("signature:manage", "Manage Signatures", Resource.SIGNATURE, Action.MANAGE, Scope.ALL),
    # Files
    ("file:create", "Upload Files", Resource.FILE, Action.CREATE, Scope.OWN),
    ("file:read", "Read Own Files", Resource.FILE, Action.READ, Scope.OWN),
    ("file:read:all", "Read All Files", Resource.FILE, Action.READ, Scope.ALL),
    ("file:delete", "Delete Own Files", Resource.FILE, Action.DELETE, Scope.OWN),
    ("file:delete:all", "Delete Any File", Resource.FILE, Action.DELETE, Scope.ALL),
    ("file:manage", "Manage Files", Resource.FILE, Action.MANAGE, Scope.ALL),
    # Action logs
    ("action-log:read", "Read Own Action Logs", Resource.ACTION_LOG, Action.READ, Scope.OWN),
    ("action-log:read:all", "Read All Action Logs", Resource.ACTION_LOG, Action.READ, Scope.ALL),
    ("action-log:list", "List Action Logs", Resource.ACTION_LOG, Action.LIST, Scope.ALL),
    ("action-log:export", "Export Action Logs", Resource.ACTION_LOG, Action.EXPORT, Scope.ALL),
    # System
    ("system:manage", "System Administration", Resource.SYSTEM, Action.MANAGE, Scope.ALL),
    ("system:export", "Export System Data", Resource.SYSTEM, Action.EXPORT, Scope.ALL),
    ("system:import", "Import System Data", Resource.SYSTEM, Action.IMPORT, Scope.ALL),
)

# =============================================================================
# Roles
# =============================================================================

# (code, name, description, level)
DEFAULT_ROLES: Final[tuple[tuple[str, str, str, int], ...]] = (
    ("super-admin", "Super Administrator", "Full system access with all permissions", 100),
    (
        "admin",
        "Administrator",
        "Administrative access to manage users, roles, and system settings",
        90,
    ),
    ("manager", "Manager", "Department manager with approval permissions", 50),
    ("supervisor", "Supervisor", "Team supervisor with limited approval permissions", 40),
    ("employee", "Employee", "Regular employee with basic permissions", 10),
    ("viewer", "Viewer", "Read-only access to view data", 5),
)

# =============================================================================
# Grants (role code -> permission codes)
# =============================================================================

ROLE_PERMISSIONS: Final[dict[str, tuple[str, ...]]] = {
    # MANAGE on every resource covers all actions
    "super-admin": (
        "user:manage",
        "department:manage",
        "role:manage",
        "permission:manage",
        "expense-claim:manage",
        "off-site-work:manage",
        "monthly-request:manage",
        "signature:manage",
        "file:manage",
        "action-log:read:all",
        "action-log:list",
        "action-log:export",
        "system:manage",
        "system:export",
        "system:import",
    ),
    "admin": (
        "user:create",
        "user:read:all",
        "user:update:all",
        "user:delete",
        "user:list",
        "department:read",
        "department:list",
        "role:read",
        "role:list",
        "permission:read",
        "permission:list",
        "expense-claim:read:all",
        "expense-claim:list:all",
        "expense-claim:approve:all",
        "expense-claim:reject:all",
        "off-site-work:read:all",
        "off-site-work:list:all",
        "monthly-request:read:all",
        "monthly-request:approve",
        "signature:read:all",
        "file:read:all",
        "action-log:read:all",
        "action-log:list",
    ),
    "manager": (
        "user:read:department",
        "department:read",
        "department:list",
        "expense-claim:create",
        "expense-claim:read",
        "expense-claim:read:department",
        "expense-claim:update",
        "expense-claim:list",
        "expense-claim:list:department",
        "expense-claim:submit",
        "expense-claim:approve",
        "expense-claim:reject",
        "expense-claim:cancel",
        "off-site-work:create",
        "off-site-work:read",
        "off-site-work:read:all",
        "off-site-work:update",
        "off-site-work:list",
        "off-site-work:list:all",
        "monthly-request:create",
        "monthly-request:read",
        "monthly-request:update",
        "monthly-request:submit",
        "signature:create",
        "signature:read",
        "signature:update",
        "signature:delete",
        "file:create",
        "file:read",
        "file:delete",
    ),
    "supervisor": (
        "user:read:department",
        "department:read",
        "expense-claim:create",
        "expense-claim:read",
        "expense-claim:read:department",
        "expense-claim:update",
        "expense-claim:list",
        "expense-claim:list:department",
        "expense-claim:submit",
        "expense-claim:cancel",
        "off-site-work:create",
        "off-site-work:read",
        "off-site-work:update",
        "off-site-work:list",
        "monthly-request:read",
        "signature:create",
        "signature:read",
        "signature:update",
        "file:create",
        "file:read",
    ),
    "employee": (
        "user:read",
        "user:update",
        "expense-claim:create",
        "expense-claim:read",
        "expense-claim:update",
        "expense-claim:list",
        "expense-claim:submit",
        "expense-claim:cancel",
        "off-site-work:read",
        "off-site-work:list",
        "signature:create",
        "signature:read",
        "signature:update",
        "signature:delete",
        "file:create",
        "file:read",
        "file:delete",
    ),
    "viewer": (
        "user:read",
        "department:read",
        "expense-claim:read",
        "expense-claim:list",
        "off-site-work:read",
        "off-site-work:list",
        "monthly-request:read",
    ),
}
