"""Audit notification for access decisions and RBAC administration.

Events are delivered fire-and-forget: emitting never blocks the caller,
and a failing sink is logged and otherwise ignored so it can never change
an authorization decision or roll back an administrative change.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from rbac_core.config import get_settings
from rbac_core.models.domain.authorization import PermissionCheckRequest, PermissionCheckResult
from rbac_core.utils.secure_logging import log_warning
from rbac_core.utils.security_events import SecurityEventType, log_security_event

logger = logging.getLogger(__name__)


class AuditAction:
    """Standard audit action types."""

    # Access decisions
    ACCESS_CHECK = "access_check"

    # Assignments
    ROLE_ASSIGN = "role_assign"
    ROLE_REVOKE = "role_revoke"

    # Role registry
    ROLE_CREATE = "role_create"
    ROLE_UPDATE = "role_update"
    ROLE_DELETE = "role_delete"
    ROLE_PERMISSION_GRANT = "role_permission_grant"
    ROLE_PERMISSION_REVOKE = "role_permission_revoke"
    ROLE_PERMISSIONS_SET = "role_permissions_set"

    # Permission catalog
    PERMISSION_CREATE = "permission_create"
    PERMISSION_UPDATE = "permission_update"
    PERMISSION_DELETE = "permission_delete"


class ResourceType:
    """Standard resource types for audit events."""

    ROLE = "role"
    PERMISSION = "permission"
    ASSIGNMENT = "assignment"


_SECURITY_EVENT_TYPES: dict[str, SecurityEventType] = {
    AuditAction.ROLE_ASSIGN: SecurityEventType.ROLE_ASSIGNED,
    AuditAction.ROLE_REVOKE: SecurityEventType.ROLE_REMOVED,
    AuditAction.ROLE_CREATE: SecurityEventType.ROLE_CREATED,
    AuditAction.ROLE_UPDATE: SecurityEventType.ROLE_UPDATED,
    AuditAction.ROLE_DELETE: SecurityEventType.ROLE_DELETED,
    AuditAction.ROLE_PERMISSION_GRANT: SecurityEventType.ROLE_PERMISSIONS_CHANGED,
    AuditAction.ROLE_PERMISSION_REVOKE: SecurityEventType.ROLE_PERMISSIONS_CHANGED,
    AuditAction.ROLE_PERMISSIONS_SET: SecurityEventType.ROLE_PERMISSIONS_CHANGED,
    AuditAction.PERMISSION_CREATE: SecurityEventType.PERMISSION_CREATED,
    AuditAction.PERMISSION_UPDATE: SecurityEventType.PERMISSION_CHANGED,
    AuditAction.PERMISSION_DELETE: SecurityEventType.PERMISSION_DELETED,
}


class AuditEvent(BaseModel):
    """A single audit notification."""

    action: str
    resource_type: str | None = None
    resource_id: UUID | None = None
    actor_id: UUID | None = None
    target_user_id: UUID | None = None
    success: bool = True
    details: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


AuditSink = Callable[[AuditEvent], Awaitable[None]]


async def security_log_sink(event: AuditEvent) -> None:
    """Default sink: write the event to the security logger."""
    if event.action == AuditAction.ACCESS_CHECK:
        event_type = (
            SecurityEventType.ACCESS_GRANTED if event.success else SecurityEventType.ACCESS_DENIED
        )
    else:
        event_type = _SECURITY_EVENT_TYPES.get(event.action, SecurityEventType.PERMISSION_CHANGED)

    log_security_event(
        event_type,
        user_id=event.actor_id,
        target_user_id=event.target_user_id,
        resource=event.resource_type,
        resource_id=event.resource_id,
        details=event.details,
        success=event.success,
    )


class AuditService:
    """Fire-and-forget audit notifier.

    Events are handed to the sink in background tasks. Call :meth:`drain`
    to wait for in-flight deliveries, for example on shutdown.
    """

    # Detail keys that must never reach an audit sink
    SENSITIVE_FIELDS = frozenset({
        "password",
        "token",
        "access_token",
        "refresh_token",
        "secret",
        "credentials",
    })

    def __init__(
        self,
        sink: AuditSink | None = None,
        audit_access_decisions: bool | None = None,
        audit_granted_decisions: bool | None = None,
    ) -> None:
        """Initialize the notifier.

        Args:
            sink: Coroutine receiving each event (defaults to the security logger)
            audit_access_decisions: Emit access decisions (defaults to settings)
            audit_granted_decisions: Emit granted decisions too, not only
                denials (defaults to settings)
        """
        if audit_access_decisions is None or audit_granted_decisions is None:
            settings = get_settings()
            if audit_access_decisions is None:
                audit_access_decisions = settings.audit_access_decisions
            if audit_granted_decisions is None:
                audit_granted_decisions = settings.audit_granted_decisions

        self.sink = sink or security_log_sink
        self.audit_access_decisions = audit_access_decisions
        self.audit_granted_decisions = audit_granted_decisions
        self._pending: set[asyncio.Task[None]] = set()

    @classmethod
    def _mask_sensitive_data(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Replace sensitive values with "[REDACTED]", recursing into dicts."""
        masked: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in cls.SENSITIVE_FIELDS:
                masked[key] = "[REDACTED]"
            elif isinstance(value, dict):
                masked[key] = cls._mask_sensitive_data(value)
            else:
                masked[key] = value
        return masked

    def notify(self, event: AuditEvent) -> None:
        """Schedule delivery of an event without waiting for it."""
        event.details = self._mask_sensitive_data(event.details)
        task = asyncio.create_task(self._deliver(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, event: AuditEvent) -> None:
        try:
            await self.sink(event)
            logger.debug(f"Audit event delivered: action={event.action}")
        except Exception as e:
            # Never let audit delivery affect the caller
            log_warning(logger, f"Failed to deliver audit event {event.action}", e)

    async def drain(self) -> None:
        """Wait until every scheduled delivery has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def access_decision(
        self,
        request: PermissionCheckRequest,
        result: PermissionCheckResult,
    ) -> None:
        """Emit an access decision, honoring the audit settings."""
        if not self.audit_access_decisions:
            return
        if result.allowed and not self.audit_granted_decisions:
            return

        details: dict[str, Any] = {
            "resource": request.resource.value,
            "action": request.action.value,
        }
        if request.target_department_id:
            details["target_department_id"] = str(request.target_department_id)
        if request.target_owner_id:
            details["target_owner_id"] = str(request.target_owner_id)
        if result.reason:
            details["reason"] = result.reason
        if result.matched_permission is not None:
            details["matched_permission"] = result.matched_permission.code
        if result.effective_scope is not None:
            details["effective_scope"] = result.effective_scope.value

        self.notify(
            AuditEvent(
                action=AuditAction.ACCESS_CHECK,
                actor_id=request.user_id,
                success=result.allowed,
                details=details,
            )
        )

    def admin_change(
        self,
        action: str,
        resource_type: str,
        resource_id: UUID | None = None,
        actor_id: UUID | None = None,
        target_user_id: UUID | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Emit an administrative change to roles, permissions or assignments.

        Args:
            action: Action performed (use AuditAction constants)
            resource_type: Type of resource (use ResourceType constants)
            resource_id: ID of the affected entity
            actor_id: ID of the user performing the change
            target_user_id: ID of the user affected by an assignment change
            details: Additional details to record
        """
        self.notify(
            AuditEvent(
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                actor_id=actor_id,
                target_user_id=target_user_id,
                details=details or {},
            )
        )
