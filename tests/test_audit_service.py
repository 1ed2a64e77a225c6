"""Audit notification tests."""

import logging
from uuid import uuid4

from rbac_core.models.domain.authorization import PermissionCheckRequest, PermissionCheckResult
from rbac_core.models.domain.enums import Action, Resource
from rbac_core.services.audit_service import (
    AuditAction,
    AuditEvent,
    AuditService,
    ResourceType,
    security_log_sink,
)


def request() -> PermissionCheckRequest:
    return PermissionCheckRequest(user_id=uuid4(), resource=Resource.FILE, action=Action.READ)


class TestAccessDecisions:
    """Which decisions reach the sink."""

    async def test_denials_only_by_default_flag(self, audit_sink) -> None:
        audit = AuditService(sink=audit_sink, audit_access_decisions=True, audit_granted_decisions=False)

        audit.access_decision(request(), PermissionCheckResult(allowed=True))
        audit.access_decision(request(), PermissionCheckResult(allowed=False, reason="No permission for file:read"))
        await audit.drain()

        assert [e.success for e in audit_sink.events] == [False]
        assert audit_sink.events[0].details["reason"] == "No permission for file:read"

    async def test_decisions_can_be_disabled(self, audit_sink) -> None:
        audit = AuditService(sink=audit_sink, audit_access_decisions=False, audit_granted_decisions=True)

        audit.access_decision(request(), PermissionCheckResult(allowed=False))
        await audit.drain()

        assert audit_sink.events == []

    async def test_admin_changes_ignore_decision_flags(self, audit_sink) -> None:
        audit = AuditService(sink=audit_sink, audit_access_decisions=False, audit_granted_decisions=False)

        audit.admin_change(AuditAction.ROLE_CREATE, ResourceType.ROLE, resource_id=uuid4())
        await audit.drain()

        assert audit_sink.actions() == [AuditAction.ROLE_CREATE]


class TestDelivery:
    """Fire-and-forget delivery."""

    async def test_failing_sink_is_logged_and_swallowed(self, caplog) -> None:
        async def broken_sink(event: AuditEvent) -> None:
            raise RuntimeError("sink unavailable")

        audit = AuditService(sink=broken_sink, audit_access_decisions=True, audit_granted_decisions=True)

        with caplog.at_level(logging.WARNING, logger="rbac_core.services.audit_service"):
            audit.admin_change(AuditAction.ROLE_DELETE, ResourceType.ROLE)
            await audit.drain()

        assert "Failed to deliver audit event role_delete" in caplog.text

    async def test_sensitive_details_are_masked(self, audit, audit_sink) -> None:
        audit.admin_change(
            AuditAction.ROLE_UPDATE,
            ResourceType.ROLE,
            details={"name": "Auditor", "token": "abc", "nested": {"password": "x"}},
        )
        await audit.drain()

        details = audit_sink.events[0].details
        assert details["name"] == "Auditor"
        assert details["token"] == "[REDACTED]"
        assert details["nested"]["password"] == "[REDACTED]"

    async def test_drain_without_pending_events(self, audit) -> None:
        await audit.drain()

    async def test_default_sink_writes_security_log(self, caplog) -> None:
        event = AuditEvent(action=AuditAction.ACCESS_CHECK, actor_id=uuid4(), success=False)

        with caplog.at_level(logging.INFO, logger="security"):
            await security_log_sink(event)

        record = caplog.records[-1]
        assert record.name == "security"
        assert record.security_event["event_type"] == "access_denied"
        assert record.security_event["success"] is False
