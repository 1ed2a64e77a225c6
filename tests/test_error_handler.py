"""Exception handler tests: status mapping and sanitized responses."""

from collections.abc import AsyncGenerator
from uuid import uuid4

import httpx
import pytest
from fastapi import FastAPI
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError

from rbac_core.exceptions import (
    CannotModifySystemRoleError,
    InactiveRoleError,
    PermissionDeniedError,
    RbacError,
    RoleAlreadyExistsError,
    RoleNotFoundError,
)
from rbac_core.main import create_app
from rbac_core.middleware import register_exception_handlers
from rbac_core.middleware.error_handler import sanitize_error_detail, status_code_for


class RolePayload(BaseModel):
    code: str
    level: int


def build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/roles/missing")
    async def missing_role() -> None:
        raise RoleNotFoundError(role_id=uuid4())

    @app.get("/roles/duplicate")
    async def duplicate_role() -> None:
        raise RoleAlreadyExistsError("admin")

    @app.get("/roles/system")
    async def system_role() -> None:
        raise CannotModifySystemRoleError("super-admin")

    @app.get("/denied")
    async def denied() -> None:
        raise PermissionDeniedError("No permission for role:delete")

    @app.get("/internal")
    async def internal() -> None:
        raise RbacError("connection to 10.0.0.5 refused")

    @app.get("/integrity")
    async def integrity() -> None:
        raise IntegrityError("INSERT INTO roles", {}, Exception("UNIQUE constraint failed: roles.code"))

    @app.post("/roles")
    async def create_role(payload: RolePayload) -> dict[str, str]:
        return {"code": payload.code}

    return app


@pytest.fixture
async def client() -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=build_app(), raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


class TestStatusMapping:
    """Core exceptions map onto HTTP status codes by family."""

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (RoleNotFoundError(), 404),
            (RoleAlreadyExistsError("admin"), 409),
            (CannotModifySystemRoleError(), 403),
            (PermissionDeniedError("nope"), 403),
            (InactiveRoleError("retired"), 400),
            (RbacError(), 500),
        ],
    )
    def test_status_code_for(self, exc: RbacError, expected: int) -> None:
        assert status_code_for(exc) == expected

    def test_sanitize_error_detail(self) -> None:
        assert sanitize_error_detail("Role not found", 404) == "Role not found"
        assert sanitize_error_detail("relation roles does not exist", 500) == "Internal server error"
        assert sanitize_error_detail(
            [{"loc": ["body", "level"], "msg": "Input should be a valid integer"}], 422
        ) == "level: Input should be a valid integer"
        assert sanitize_error_detail(None, 418) == "Request failed"


class TestHandlers:
    """Responses carry safe messages only."""

    async def test_not_found(self, client) -> None:
        response = await client.get("/roles/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Role not found"}

    async def test_conflict(self, client) -> None:
        response = await client.get("/roles/duplicate")

        assert response.status_code == 409
        assert response.json() == {"detail": "Role code already exists"}

    async def test_system_protection(self, client) -> None:
        response = await client.get("/roles/system")

        assert response.status_code == 403
        assert response.json() == {"detail": "Cannot modify system role"}

    async def test_denial_reason_is_logged_not_returned(self, client, caplog) -> None:
        with caplog.at_level("WARNING", logger="rbac_core.middleware.error_handler"):
            response = await client.get("/denied")

        assert response.status_code == 403
        assert response.json() == {"detail": "Access denied"}
        assert "No permission for role:delete" in caplog.text

    async def test_unsafe_message_is_replaced(self, client) -> None:
        response = await client.get("/internal")

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}

    async def test_integrity_error_is_a_conflict(self, client) -> None:
        response = await client.get("/integrity")

        assert response.status_code == 409
        assert response.json() == {"detail": "Resource already exists"}

    async def test_validation_error(self, client) -> None:
        response = await client.post("/roles", json={"code": "auditor", "level": "high"})

        assert response.status_code == 422
        assert response.json()["detail"].startswith("level:")


class TestApplication:
    """The application factory."""

    async def test_health(self) -> None:
        transport = httpx.ASGITransport(app=create_app())
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
        assert "X-Request-ID" in response.headers

    async def test_docs_are_disabled_outside_debug(self) -> None:
        transport = httpx.ASGITransport(app=create_app())
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.get("/docs")

        assert response.status_code == 404
