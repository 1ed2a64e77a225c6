"""Security event logging for authorization activity.

This module provides a dedicated security logger for access decisions and
for changes to roles, permissions and assignments. These events are logged
separately from application logs for security monitoring and compliance
purposes.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID


class SecurityEventType(str, Enum):
    """Types of security events that are logged."""

    # Access decisions
    ACCESS_GRANTED = "access_granted"
    ACCESS_DENIED = "access_denied"

    # Role assignment events
    ROLE_ASSIGNED = "role_assigned"
    ROLE_REMOVED = "role_removed"

    # Role registry events
    ROLE_CREATED = "role_created"
    ROLE_UPDATED = "role_updated"
    ROLE_DELETED = "role_deleted"
    ROLE_PERMISSIONS_CHANGED = "role_permissions_changed"

    # Permission catalog events
    PERMISSION_CREATED = "permission_created"
    PERMISSION_CHANGED = "permission_changed"
    PERMISSION_DELETED = "permission_deleted"


# Create a dedicated security logger with its own handler
security_logger = logging.getLogger("security")


def log_security_event(
    event_type: SecurityEventType,
    user_id: UUID | str | None = None,
    target_user_id: UUID | str | None = None,
    resource: str | None = None,
    resource_id: UUID | str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Log a security event.

    Args:
        event_type: The type of security event
        user_id: The ID of the user performing the action
        target_user_id: The ID of the user being affected (for assignments)
        resource: Kind of entity the event is about (role, permission, ...)
        resource_id: ID of that entity
        details: Additional event-specific details
        success: Whether the operation succeeded or access was granted
    """
    event_data: dict[str, Any] = {
        "event_type": event_type.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "success": success,
        "actor": {
            "user_id": str(user_id) if user_id else None,
        },
    }

    # Add target user for assignment changes
    if target_user_id:
        event_data["target"] = {"user_id": str(target_user_id)}

    if resource:
        event_data["resource"] = {
            "type": resource,
            "id": str(resource_id) if resource_id else None,
        }

    # Add any additional details
    if details:
        event_data["details"] = details

    # Log at appropriate level based on success
    if success:
        security_logger.info(
            f"Security event: {event_type.value}",
            extra={"security_event": event_data},
        )
    else:
        security_logger.warning(
            f"Security event (failed): {event_type.value}",
            extra={"security_event": event_data},
        )
