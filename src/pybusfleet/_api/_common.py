"""Shared helpers for endpoint modules.

This module centralizes error mapping for the two remote services:
- document store errors keyed by HTTP status
- identity provider errors keyed by the message code in the body

It is internal to pybusfleet and may change at any time.
"""

from __future__ import annotations

from typing import Any

from pybusfleet._constants import (
    ACCOUNT_EXISTS_CODES,
    INVALID_CREDENTIAL_CODES,
    RATE_LIMIT_CODES,
    SESSION_EXPIRED_CODES,
    WEAK_PASSWORD_CODES,
)
from pybusfleet.exceptions import (
    FleetAccountExistsError,
    FleetApiError,
    FleetAuthenticationError,
    FleetDocumentNotFoundError,
    FleetRateLimitError,
    FleetSessionExpiredError,
    FleetTransportError,
    FleetWeakPasswordError,
)


def _error_details(body: dict[str, Any]) -> tuple[str, str]:
    """Return ``(status, message)`` from a ``{"error": {...}}`` body."""
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("status", "")), str(error.get("message", ""))
    if isinstance(error, str):
        return "", error
    return "", ""


def raise_for_store_status(*, endpoint: str, status: int, body: dict[str, Any]) -> None:
    """Map a non-2xx document store response to an exception."""
    if 200 <= status < 300:
        return
    code, message = _error_details(body)
    detail = f"{endpoint} failed: HTTP {status} {code} {message}".rstrip()
    if status == 401:
        raise FleetSessionExpiredError(detail, code=code or "UNAUTHENTICATED", endpoint=endpoint)
    if status == 403:
        raise FleetAuthenticationError(detail, code=code or "PERMISSION_DENIED", endpoint=endpoint)
    if status == 404:
        raise FleetDocumentNotFoundError(detail, code=code or "NOT_FOUND", endpoint=endpoint)
    if status == 429 or status >= 500:
        raise FleetTransportError(detail, status_code=status, endpoint=endpoint)
    raise FleetApiError(detail, code=code, endpoint=endpoint)


def identity_error_code(message: str) -> str:
    """Extract the error code from an identity provider message.

    Messages look like ``"EMAIL_EXISTS"`` or
    ``"WEAK_PASSWORD : Password should be at least 6 characters"``.
    """
    return message.split(":", 1)[0].strip()


def raise_for_identity_status(*, endpoint: str, status: int, body: dict[str, Any]) -> None:
    """Map a non-2xx identity provider response to an exception."""
    if 200 <= status < 300:
        return
    if status >= 500:
        raise FleetTransportError(
            f"{endpoint} failed: HTTP {status}",
            status_code=status,
            endpoint=endpoint,
        )
    _, message = _error_details(body)
    code = identity_error_code(message)
    detail = f"{endpoint} failed: {message or f'HTTP {status}'}"
    if code in ACCOUNT_EXISTS_CODES:
        raise FleetAccountExistsError(detail, code=code, endpoint=endpoint)
    if code in WEAK_PASSWORD_CODES:
        raise FleetWeakPasswordError(detail, code=code, endpoint=endpoint)
    if code in RATE_LIMIT_CODES:
        raise FleetRateLimitError(detail, code=code, endpoint=endpoint)
    if code in SESSION_EXPIRED_CODES:
        raise FleetSessionExpiredError(detail, code=code, endpoint=endpoint)
    if code in INVALID_CREDENTIAL_CODES or status in (400, 401, 403):
        raise FleetAuthenticationError(detail, code=code, endpoint=endpoint)
    raise FleetApiError(detail, code=code, endpoint=endpoint)
