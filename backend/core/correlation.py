"""
Request-scoped correlation IDs.

The ID travels in the X-Correlation-ID header, in every log record and in
every error body, so a user can quote it when reporting a problem.
"""

import uuid
from contextvars import ContextVar

CORRELATION_HEADER = "X-Correlation-ID"

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Return a fresh 8-hex-character ID, short enough to read out loud."""
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Return the current request's ID, or "" outside a request."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


def resolve_correlation_id(incoming: str | None) -> str:
    """
    Pick the ID for a new request.

    A client-supplied value is kept when it looks sane (non-empty, at most
    64 printable characters); anything else is replaced.

    Args:
        incoming: Raw X-Correlation-ID header value, if any.

    Returns:
        The correlation ID to use for this request.
    """
    if incoming and len(incoming) <= 64 and incoming.isprintable():
        return incoming.strip() or generate_correlation_id()
    return generate_correlation_id()
