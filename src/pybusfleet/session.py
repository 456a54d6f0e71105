"""Session state for authenticated store calls."""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field

#: Default id token lifetime in seconds when the identity provider does
#: not report one.
DEFAULT_SESSION_TTL: float = 3600.0

#: Tokens are refreshed this many seconds before their reported expiry.
EXPIRY_MARGIN: float = 60.0


class Session(BaseModel):
    """Credentials of a signed-in user.

    Sessions are immutable; refreshing produces a new instance. Every
    authenticated call receives the session explicitly.

    Parameters
    ----------
    user_id : str
        Identity provider user id (``localId``).
    email : str
        Email the user signed in with.
    id_token : str
        Bearer token sent to the document store.
    refresh_token : str
        Token exchanged for a new id token once this one expires.
    created_at : float
        Monotonic timestamp (``time.monotonic()``) when the token was
        issued.  Defaults to *now*.
    ttl : float
        Token lifetime in seconds.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    user_id: str
    email: str = ""
    id_token: str
    refresh_token: str = ""
    created_at: float = Field(default_factory=time.monotonic)
    ttl: float = DEFAULT_SESSION_TTL

    @property
    def is_expired(self) -> bool:
        """Whether the id token is past (or within the margin of) its lifetime."""
        return self.age >= max(self.ttl - EXPIRY_MARGIN, 0.0)

    @property
    def age(self) -> float:
        """Seconds since the token was issued."""
        return time.monotonic() - self.created_at

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token)
