"""Identity provider endpoints: sign-in, sign-up and token refresh."""

from __future__ import annotations

import logging
from typing import Any

from pybusfleet._api._common import raise_for_identity_status
from pybusfleet._transport import Transport
from pybusfleet.config import FleetConfig
from pybusfleet.exceptions import FleetAuthenticationError
from pybusfleet.session import DEFAULT_SESSION_TTL, Session

_logger = logging.getLogger(__name__)

SIGN_IN_ENDPOINT = "accounts:signInWithPassword"
SIGN_UP_ENDPOINT = "accounts:signUp"
REFRESH_ENDPOINT = "token"


def _ttl(config: FleetConfig, expires_in: Any) -> float:
    if config.session_ttl is not None:
        return config.session_ttl
    try:
        return float(expires_in)
    except (TypeError, ValueError):
        return DEFAULT_SESSION_TTL


def _require(body: dict[str, Any], key: str, endpoint: str) -> str:
    value = body.get(key)
    if not isinstance(value, str) or not value:
        raise FleetAuthenticationError(f"{endpoint} response is missing {key!r}", endpoint=endpoint)
    return value


def parse_account_response(config: FleetConfig, body: dict[str, Any], endpoint: str) -> Session:
    """Build a session from a sign-in or sign-up response."""
    return Session(
        user_id=_require(body, "localId", endpoint),
        email=str(body.get("email", "")),
        id_token=_require(body, "idToken", endpoint),
        refresh_token=str(body.get("refreshToken", "")),
        ttl=_ttl(config, body.get("expiresIn")),
    )


async def _post_account(
    endpoint: str,
    config: FleetConfig,
    transport: Transport,
    email: str,
    password: str,
) -> Session:
    url = f"{config.identity_url.rstrip('/')}/{endpoint}"
    status, body = await transport.request(
        "POST",
        url,
        params={"key": config.api_key},
        json_body={"email": email, "password": password, "returnSecureToken": True},
    )
    raise_for_identity_status(endpoint=endpoint, status=status, body=body)
    return parse_account_response(config, body, endpoint)


async def sign_in(config: FleetConfig, transport: Transport, email: str, password: str) -> Session:
    """Sign in with email and password.

    Raises
    ------
    FleetAuthenticationError
        On invalid credentials (or a subclass for rate limiting).
    """
    _logger.debug("Signing in %s", email)
    return await _post_account(SIGN_IN_ENDPOINT, config, transport, email, password)


async def sign_up(config: FleetConfig, transport: Transport, email: str, password: str) -> Session:
    """Create an email/password account and return its session.

    The caller's own session is not affected.

    Raises
    ------
    FleetAccountExistsError
        If the email is already registered.
    FleetWeakPasswordError
        If the password is rejected.
    """
    _logger.debug("Creating account %s", email)
    return await _post_account(SIGN_UP_ENDPOINT, config, transport, email, password)


async def refresh(config: FleetConfig, transport: Transport, session: Session) -> Session:
    """Exchange the session's refresh token for a new id token."""
    if not session.can_refresh:
        raise FleetAuthenticationError("Session has no refresh token", endpoint=REFRESH_ENDPOINT)
    url = f"{config.token_url.rstrip('/')}/{REFRESH_ENDPOINT}"
    status, body = await transport.request(
        "POST",
        url,
        params={"key": config.api_key},
        json_body={"grant_type": "refresh_token", "refresh_token": session.refresh_token},
    )
    raise_for_identity_status(endpoint=REFRESH_ENDPOINT, status=status, body=body)
    return Session(
        user_id=str(body.get("user_id") or session.user_id),
        email=session.email,
        id_token=_require(body, "id_token", REFRESH_ENDPOINT),
        refresh_token=str(body.get("refresh_token") or session.refresh_token),
        ttl=_ttl(config, body.get("expires_in")),
    )
