"""Request ID generation utilities."""

import uuid

REQUEST_ID_HEADER = "X-Request-ID"


def generate_request_id() -> str:
    """Generate a unique request ID for tracing.

    Returns:
        A UUID4 string for request tracking across the application.
    """
    return str(uuid.uuid4())


def resolve_request_id(incoming: str | None) -> str:
    """Reuse a well-formed incoming request ID or generate a new one.

    Args:
        incoming: Value of the request ID header, if any

    Returns:
        The incoming ID when it is a valid UUID, otherwise a fresh one
    """
    if incoming:
        try:
            return str(uuid.UUID(incoming))
        except ValueError:
            pass
    return generate_request_id()
