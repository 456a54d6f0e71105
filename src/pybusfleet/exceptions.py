"""Custom exception hierarchy for pybusfleet."""

from __future__ import annotations


class FleetError(Exception):
    """Base exception for all pybusfleet errors."""


class FleetConfigError(FleetError):
    """Invalid or missing configuration."""


class FleetValidationError(FleetError):
    """Form input rejected before any write was attempted.

    ``field`` names the offending form field when a single field is at
    fault, and is ``None`` for rules that span several fields.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class FleetStoreUnavailableError(FleetError):
    """The document store could not be reached or refused the credentials.

    This is the only error raised by whole-collection fetches; the
    original transport or authentication error is chained as ``__cause__``.
    """

    def __init__(self, message: str, *, collection: str = "") -> None:
        self.collection = collection
        super().__init__(message)


class FleetTransportError(FleetError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FleetApiError(FleetError):
    """The store or identity provider returned an application-level error."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class FleetDocumentNotFoundError(FleetApiError):
    """An update or delete targeted a document that does not exist."""


class FleetAuthenticationError(FleetApiError):
    """Sign-in failed or the credentials were rejected."""


class FleetSessionExpiredError(FleetAuthenticationError):
    """Id token rejected by the store or the identity provider.

    The client catches this internally to refresh the session once.
    """


class FleetAccountExistsError(FleetAuthenticationError):
    """An account with this email already exists (``EMAIL_EXISTS``)."""


class FleetWeakPasswordError(FleetAuthenticationError):
    """The identity provider rejected the password as too weak."""


class FleetRateLimitError(FleetAuthenticationError):
    """Too many failed attempts (``TOO_MANY_ATTEMPTS_TRY_LATER``)."""
