"""Permission catalog tests."""

from uuid import uuid4

import pytest

from rbac_core.exceptions import (
    CannotModifySystemPermissionError,
    PermissionAlreadyExistsError,
    PermissionNotFoundError,
    ValidationError,
)
from rbac_core.models.domain.enums import Action, Resource, Scope
from rbac_core.models.dto.rbac import (
    PermissionCreateRequest,
    PermissionFilter,
    PermissionUpdateRequest,
)
from rbac_core.repositories.role_repository import RoleRepository
from rbac_core.services.audit_service import AuditAction
from rbac_core.services.permission_service import PermissionService


@pytest.fixture
def service(session, audit) -> PermissionService:
    return PermissionService(session, audit=audit)


def create_request(code: str, **overrides) -> PermissionCreateRequest:
    values = {
        "code": code,
        "name": code.title(),
        "resource": Resource.EXPENSE_CLAIM,
        "action": Action.APPROVE,
        "scope": Scope.DEPARTMENT,
    }
    values.update(overrides)
    return PermissionCreateRequest(**values)


class TestCreate:
    """Adding catalog entries."""

    async def test_create_permission(self, service, audit, audit_sink) -> None:
        permission = await service.create_permission(create_request("expense-claim:approve"))
        await audit.drain()

        assert permission.code == "expense-claim:approve"
        assert permission.resource == Resource.EXPENSE_CLAIM
        assert permission.scope == Scope.DEPARTMENT
        assert permission.is_active is True
        assert audit_sink.actions() == [AuditAction.PERMISSION_CREATE]

    async def test_duplicate_code_is_rejected(self, service) -> None:
        await service.create_permission(create_request("expense-claim:approve"))

        with pytest.raises(PermissionAlreadyExistsError):
            await service.create_permission(create_request("expense-claim:approve"))

    async def test_blank_code_is_rejected(self, service) -> None:
        with pytest.raises(ValidationError):
            await service.create_permission(create_request("   "))

    async def test_create_many_skips_existing_codes(self, service) -> None:
        await service.create_permission(create_request("expense-claim:approve"))

        created = await service.create_many(
            [
                create_request("expense-claim:approve"),
                create_request("expense-claim:reject", action=Action.REJECT),
                create_request("expense-claim:reject", action=Action.REJECT),
            ]
        )

        assert created == 1
        assert len(await service.list_permissions()) == 2


class TestUpdate:
    """Editing, deactivating and deleting catalog entries."""

    async def test_update_changes_only_given_fields(self, service) -> None:
        permission = await service.create_permission(
            create_request("expense-claim:approve", description="Approve claims")
        )

        updated = await service.update_permission(
            permission.id, PermissionUpdateRequest(scope=Scope.ALL)
        )

        assert updated.scope == Scope.ALL
        assert updated.description == "Approve claims"
        assert updated.name == permission.name

    async def test_update_missing_permission(self, service) -> None:
        with pytest.raises(PermissionNotFoundError):
            await service.update_permission(uuid4(), PermissionUpdateRequest(name="Nothing"))

    async def test_system_permission_is_protected(self, service) -> None:
        permission = await service.create_permission(
            create_request("expense-claim:approve", is_system=True)
        )

        with pytest.raises(CannotModifySystemPermissionError):
            await service.deactivate_permission(permission.id)
        with pytest.raises(CannotModifySystemPermissionError):
            await service.delete_permission(permission.id)

        renamed = await service.update_permission(
            permission.id, PermissionUpdateRequest(name="Approve Expense Claims")
        )
        assert renamed.name == "Approve Expense Claims"
        assert renamed.is_active is True

    async def test_deactivate_permission(self, service) -> None:
        permission = await service.create_permission(create_request("expense-claim:approve"))

        deactivated = await service.deactivate_permission(permission.id)

        assert deactivated.is_active is False
        assert await service.list_by_resource(Resource.EXPENSE_CLAIM) == []

    async def test_delete_permission_removes_grants(self, service, factory) -> None:
        read = await factory.permission(Resource.FILE, Action.READ, Scope.ALL)
        role = await factory.role("reader", [read])

        permission_id, code = read.id, read.code

        await service.delete_permission(permission_id)

        assert await service.get_permission_by_code(code) is None
        with pytest.raises(PermissionNotFoundError):
            await service.get_permission(permission_id)
        assert await RoleRepository(service.session).count_grants(role.id) == 0


class TestQueries:
    """Listing and filtering the catalog."""

    async def test_list_by_resource_is_active_only_and_ordered(self, service, factory) -> None:
        await factory.permission(Resource.FILE, Action.READ, Scope.ALL)
        await factory.permission(Resource.FILE, Action.CREATE, Scope.OWN)
        await factory.permission(Resource.FILE, Action.DELETE, Scope.OWN, is_active=False)
        await factory.permission(Resource.USER, Action.READ, Scope.ALL)

        permissions = await service.list_by_resource(Resource.FILE)

        assert [p.action for p in permissions] == [Action.CREATE, Action.READ]

    async def test_list_permissions_filters(self, service, factory) -> None:
        await factory.permission(Resource.FILE, Action.READ, Scope.ALL)
        await factory.permission(Resource.FILE, Action.READ, Scope.OWN)
        await factory.permission(Resource.USER, Action.READ, Scope.ALL, is_active=False)

        by_scope = await service.list_permissions(PermissionFilter(scope=Scope.ALL))
        active_reads = await service.list_permissions(
            PermissionFilter(action=Action.READ, is_active=True)
        )
        searched = await service.list_permissions(PermissionFilter(search="USER:"))

        assert {p.code for p in by_scope} == {"file:read:all", "user:read:all"}
        assert {p.code for p in active_reads} == {"file:read:all", "file:read:own"}
        assert [p.code for p in searched] == ["user:read:all"]
