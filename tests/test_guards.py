"""Request guard tests over an in-process FastAPI app."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID, uuid4

import httpx
import pytest
from fastapi import Depends, FastAPI, Request

from rbac_core.dependencies import get_authorization_service
from rbac_core.middleware import RequestIdMiddleware, register_exception_handlers
from rbac_core.models.domain.authorization import PermissionCheckResult
from rbac_core.models.domain.enums import Action, Resource, Scope
from rbac_core.security.guards import (
    can,
    can_all,
    can_any,
    has_any_role,
    require_all_permissions,
    require_any_permission,
    require_permission,
    require_role,
)
from rbac_core.services.authorization_service import AuthorizationService
from rbac_core.utils.request_id import REQUEST_ID_HEADER

USER_HEADER = "X-Test-User"


def claim_owner(request: Request) -> UUID | None:
    owner = request.query_params.get("owner")
    return UUID(owner) if owner else None


def build_app(service: AuthorizationService) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    @app.middleware("http")
    async def authenticate(request: Request, call_next):
        user_id = request.headers.get(USER_HEADER)
        if user_id:
            request.state.user_id = user_id
        return await call_next(request)

    app.dependency_overrides[get_authorization_service] = lambda: service

    @app.get("/claims/{claim_id}")
    async def read_claim(
        claim_id: str,
        check: Annotated[
            PermissionCheckResult,
            Depends(require_permission(Resource.EXPENSE_CLAIM, Action.READ, owner_resolver=claim_owner)),
        ],
    ) -> dict[str, str]:
        return {"claim_id": claim_id, "scope": check.effective_scope.value}

    @app.post("/departments/{department_id}/claims/{claim_id}/approve")
    async def approve_claim(
        department_id: UUID,
        check: Annotated[
            PermissionCheckResult,
            Depends(
                require_permission(
                    Resource.EXPENSE_CLAIM, Action.APPROVE, department_param="department_id"
                )
            ),
        ],
    ) -> dict[str, str]:
        return {"scope": check.effective_scope.value}

    @app.get("/files")
    async def list_files(
        user_id: Annotated[
            UUID,
            Depends(require_any_permission([(Resource.FILE, Action.LIST), (Resource.FILE, Action.READ)])),
        ],
    ) -> dict[str, str]:
        return {"user_id": str(user_id)}

    @app.post("/files/export")
    async def export_files(
        user_id: Annotated[
            UUID,
            Depends(require_all_permissions([(Resource.FILE, Action.READ), (Resource.FILE, Action.EXPORT)])),
        ],
    ) -> dict[str, str]:
        return {"user_id": str(user_id)}

    @app.get("/admin")
    async def admin_area(
        user_id: Annotated[UUID, Depends(require_role("admin"))],
    ) -> dict[str, str]:
        return {"user_id": str(user_id)}

    return app


@pytest.fixture
def service(session) -> AuthorizationService:
    return AuthorizationService(session)


@pytest.fixture
async def client(service) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=build_app(service))
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def as_user(user_id: UUID) -> dict[str, str]:
    return {USER_HEADER: str(user_id)}


class TestRequirePermission:
    """Single-permission guard with scope validation."""

    async def test_unauthenticated_request_is_rejected(self, client) -> None:
        response = await client.get(f"/claims/{uuid4()}")

        assert response.status_code == 401
        assert response.json() == {"detail": "Authentication required"}

    async def test_malformed_user_id_is_rejected(self, client) -> None:
        response = await client.get(f"/claims/{uuid4()}", headers={USER_HEADER: "not-a-uuid"})

        assert response.status_code == 401

    async def test_denial_hides_the_reason(self, client) -> None:
        response = await client.get(f"/claims/{uuid4()}", headers=as_user(uuid4()))

        assert response.status_code == 403
        assert response.json() == {"detail": "Access denied"}
        assert REQUEST_ID_HEADER in response.headers

    async def test_owner_check(self, client, factory) -> None:
        read = await factory.permission(Resource.EXPENSE_CLAIM, Action.READ, Scope.OWN)
        role = await factory.role("employee", [read])
        user_id = uuid4()
        await factory.assign(user_id, role)

        own = await client.get(f"/claims/c1?owner={user_id}", headers=as_user(user_id))
        foreign = await client.get(f"/claims/c1?owner={uuid4()}", headers=as_user(user_id))

        assert own.status_code == 200
        assert own.json() == {"claim_id": "c1", "scope": "OWN"}
        assert foreign.status_code == 403

    async def test_department_from_path(self, client, factory) -> None:
        approve = await factory.permission(Resource.EXPENSE_CLAIM, Action.APPROVE, Scope.DEPARTMENT)
        manager = await factory.role("manager", [approve])
        d1 = await factory.department("d1")
        d2 = await factory.department("d2")
        user_id = uuid4()
        await factory.assign(user_id, manager, d1)

        in_d1 = await client.post(f"/departments/{d1.id}/claims/c1/approve", headers=as_user(user_id))
        in_d2 = await client.post(f"/departments/{d2.id}/claims/c1/approve", headers=as_user(user_id))

        assert in_d1.status_code == 200
        assert in_d1.json() == {"scope": "DEPARTMENT"}
        assert in_d2.status_code == 403

    async def test_request_id_is_echoed(self, client) -> None:
        request_id = str(uuid4())

        response = await client.get(
            f"/claims/{uuid4()}", headers={**as_user(uuid4()), REQUEST_ID_HEADER: request_id}
        )

        assert response.headers[REQUEST_ID_HEADER] == request_id


class TestBatchAndRoleGuards:
    """Coarse guards."""

    async def test_any_permission(self, client, factory) -> None:
        read = await factory.permission(Resource.FILE, Action.READ, Scope.OWN)
        role = await factory.role("employee", [read])
        user_id = uuid4()
        await factory.assign(user_id, role)

        allowed = await client.get("/files", headers=as_user(user_id))
        denied = await client.get("/files", headers=as_user(uuid4()))

        assert allowed.status_code == 200
        assert allowed.json() == {"user_id": str(user_id)}
        assert denied.status_code == 403

    async def test_all_permissions(self, client, factory) -> None:
        read = await factory.permission(Resource.FILE, Action.READ, Scope.ALL)
        manage = await factory.permission(Resource.FILE, Action.MANAGE, Scope.ALL)
        reader = await factory.role("reader", [read])
        owner = await factory.role("owner", [manage])
        reader_id, owner_id = uuid4(), uuid4()
        await factory.assign(reader_id, reader)
        await factory.assign(owner_id, owner)

        assert (await client.post("/files/export", headers=as_user(reader_id))).status_code == 403
        assert (await client.post("/files/export", headers=as_user(owner_id))).status_code == 200

    async def test_role(self, client, factory) -> None:
        admin = await factory.role("admin", level=90)
        user_id = uuid4()
        await factory.assign(user_id, admin)

        assert (await client.get("/admin", headers=as_user(user_id))).status_code == 200
        assert (await client.get("/admin", headers=as_user(uuid4()))).status_code == 403


class TestHelpers:
    """Helper coroutines for use inside handlers."""

    async def test_can_and_batch_helpers(self, service, factory) -> None:
        read = await factory.permission(Resource.SIGNATURE, Action.READ, Scope.OWN)
        role = await factory.role("employee", [read])
        user_id = uuid4()
        await factory.assign(user_id, role)

        assert await can(service, user_id, Resource.SIGNATURE, Action.READ) is True
        assert await can(service, user_id, Resource.SIGNATURE, Action.READ, owner_id=uuid4()) is False
        assert await can_any(
            service, user_id, [(Resource.SIGNATURE, Action.DELETE), (Resource.SIGNATURE, Action.READ)]
        ) is True
        assert await can_all(
            service, user_id, [(Resource.SIGNATURE, Action.DELETE), (Resource.SIGNATURE, Action.READ)]
        ) is False
        assert await can_all(service, user_id, []) is False

    async def test_has_any_role(self, service, factory) -> None:
        viewer = await factory.role("viewer")
        user_id = uuid4()
        await factory.assign(user_id, viewer)

        assert await has_any_role(service, user_id, ["admin", "viewer"]) is True
        assert await has_any_role(service, user_id, ["admin"]) is False
