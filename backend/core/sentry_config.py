"""
Sentry SDK configuration.

Disabled unless SENTRY_DSN is set. Accounts belong to minors, so events are
stripped of everything but the user id before leaving the server.
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

UNTRACED_PATHS = frozenset({"/api/health"})

# Request headers that must never reach Sentry
FILTERED_HEADERS = ("Authorization", "authorization", "Cookie", "cookie")


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Remove personal data from an error event.

    Only the user id survives. Cookies are dropped and credentials in
    headers are replaced with a marker. Upload bodies are never attached.
    """
    user = event.get("user")
    if user:
        for key in ("email", "username", "name", "ip_address"):
            user.pop(key, None)

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        request.pop("data", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for name in FILTERED_HEADERS:
                if name in headers:
                    headers[name] = "[Filtered]"

    return event


def _before_send_transaction(event: Event, hint: Hint) -> Event | None:
    """Drop health-check transactions."""
    transaction_name = event.get("transaction", "")
    if any(transaction_name.endswith(path) for path in UNTRACED_PATHS):
        return None
    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """
    Sample rate per request.

    Admin and auth traffic is traced more often, health checks never.
    """
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    path = sampling_context.get("asgi_scope", {}).get("path", "")
    if path in UNTRACED_PATHS:
        return 0.0
    if path.startswith("/api/admin") or path.startswith("/api/auth"):
        return 0.5
    # Booking is the one write path with contention worth watching
    if path.startswith("/api/events"):
        return 0.3
    return 0.1


def init_sentry() -> None:
    """
    Initialize Sentry with the FastAPI, SQLAlchemy and Loguru integrations.

    Call this before creating the FastAPI app.
    """
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
