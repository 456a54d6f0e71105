"""Client configuration for pybusfleet."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pybusfleet._constants import (
    DEFAULT_DRIVER_EMAIL_DOMAIN,
    IDENTITY_BASE_URL,
    STORE_BASE_URL,
    TOKEN_BASE_URL,
)
from pybusfleet.exceptions import FleetConfigError


@dataclasses.dataclass(frozen=True)
class DemoAccount:
    """Credentials of the shared demo administrator account."""

    email: str = "demo@admin.com"
    password: str = "demo123456"


@dataclasses.dataclass(frozen=True)
class FleetConfig:
    """Client configuration.

    Parameters
    ----------
    project_id : str
        Document store project identifier.
    api_key : str
        Web API key of the identity provider.
    store_url : str
        Document store REST base URL.
    identity_url : str
        Identity provider REST base URL (``accounts:*`` endpoints).
    token_url : str
        Secure token service base URL used to refresh id tokens.
    database : str
        Database name inside the project.
    driver_email_domain : str
        Domain appended to a driver's phone number to build the
        login email of driver accounts.
    page_size : int
        Documents requested per page when fetching a collection.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    session_ttl : float or None
        Override for the id token lifetime in seconds.  ``None`` uses the
        ``expiresIn`` value returned by the identity provider.
    api_trace_enabled : bool
        Log redacted request/response bodies at DEBUG level.
    demo : DemoAccount
        Demo administrator credentials.
    """

    project_id: str
    api_key: str
    store_url: str = STORE_BASE_URL
    identity_url: str = IDENTITY_BASE_URL
    token_url: str = TOKEN_BASE_URL
    database: str = "(default)"
    driver_email_domain: str = DEFAULT_DRIVER_EMAIL_DOMAIN
    page_size: int = 300
    request_timeout: float = 30.0
    session_ttl: float | None = None
    api_trace_enabled: bool = False
    demo: DemoAccount = dataclasses.field(default_factory=DemoAccount)

    def __post_init__(self) -> None:
        if not self.project_id or not self.project_id.strip():
            raise FleetConfigError("project_id is required")
        if not self.api_key or not self.api_key.strip():
            raise FleetConfigError("api_key is required")
        if self.page_size <= 0:
            raise FleetConfigError(f"page_size must be positive, got {self.page_size}")

    @property
    def documents_url(self) -> str:
        """Base URL of the documents resource for this project."""
        return f"{self.store_url.rstrip('/')}/projects/{self.project_id}/databases/{self.database}/documents"

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetConfig:
        """Create configuration from environment variables.

        Reads ``FLEET_PROJECT_ID``, ``FLEET_API_KEY`` and optional
        ``FLEET_*`` variables. Explicit keyword arguments override
        environment values.

        Raises
        ------
        FleetConfigError
            If a numeric variable cannot be parsed or a required value is
            missing.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "FLEET_PROJECT_ID": "project_id",
            "FLEET_API_KEY": "api_key",
            "FLEET_STORE_URL": "store_url",
            "FLEET_IDENTITY_URL": "identity_url",
            "FLEET_TOKEN_URL": "token_url",
            "FLEET_DATABASE": "database",
            "FLEET_DRIVER_EMAIL_DOMAIN": "driver_email_domain",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "FLEET_PAGE_SIZE": ("page_size", int),
            "FLEET_REQUEST_TIMEOUT": ("request_timeout", float),
            "FLEET_SESSION_TTL": ("session_ttl", float),
        }
        for env_key, (field_name, caster) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = caster(val)
            except ValueError as exc:
                raise FleetConfigError(f"{env_key} is not a valid number: {val!r}") from exc

        if "api_trace_enabled" not in overrides:
            trace = env.get("FLEET_API_TRACE_ENABLED", "").strip().lower()
            config_kwargs["api_trace_enabled"] = trace in {"1", "true", "yes", "on"}

        config_kwargs.update(overrides)
        config_kwargs.setdefault("project_id", "")
        config_kwargs.setdefault("api_key", "")

        return cls(**config_kwargs)
