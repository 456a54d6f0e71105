"""JSON-over-HTTPS transport for the document store and identity provider."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import aiohttp

from pybusfleet._constants import USER_AGENT
from pybusfleet._redact import redact_for_log
from pybusfleet.config import FleetConfig
from pybusfleet.exceptions import FleetTransportError

_logger = logging.getLogger(__name__)

#: Query parameters. A sequence of pairs allows repeated keys such as
#: ``updateMask.fieldPaths``.
QueryParams = Mapping[str, str] | Sequence[tuple[str, str]]


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Tests pass in-memory doubles; production uses `JsonTransport`.
    Implementations return the decoded JSON body together with the HTTP
    status and never raise for non-2xx statuses: mapping a status to an
    exception is the endpoint module's job, since only it knows whether a
    404 means "missing document" or "bad URL".
    """

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: QueryParams | None = None,
        json_body: Mapping[str, Any] | None = None,
        token: str | None = None,
    ) -> tuple[int, dict[str, Any]]:
        ...


class JsonTransport:
    """aiohttp transport that sends JSON bodies and decodes JSON replies."""

    def __init__(self, config: FleetConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: QueryParams | None = None,
        json_body: Mapping[str, Any] | None = None,
        token: str | None = None,
    ) -> tuple[int, dict[str, Any]]:
        """Send one request and return ``(status, decoded_body)``.

        An empty body decodes to ``{}``.

        Raises
        ------
        FleetTransportError
            On connection failures, timeouts, or a body that is not a JSON
            object.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if json_body is not None:
            headers["content-type"] = "application/json; charset=UTF-8"
        if token:
            headers["authorization"] = f"Bearer {token}"

        data = json.dumps(json_body, separators=(",", ":")) if json_body is not None else None

        _logger.debug("%s %s", method, url)
        if self._config.api_trace_enabled and json_body is not None:
            _logger.debug("Request body: %s", redact_for_log(json_body))

        try:
            async with self._http.request(
                method,
                url,
                params=list(params.items()) if isinstance(params, Mapping) else params,
                data=data,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except TimeoutError as exc:
            raise FleetTransportError(f"{method} {url} timed out", endpoint=url) from exc
        except aiohttp.ClientError as exc:
            raise FleetTransportError(f"{method} {url} failed: {exc}", endpoint=url) from exc

        if not text.strip():
            return status, {}

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FleetTransportError(
                f"Invalid JSON from {url} (HTTP {status}): {text[:200]}",
                status_code=status,
                endpoint=url,
            ) from exc

        if not isinstance(body, dict):
            raise FleetTransportError(
                f"Expected a JSON object from {url}, got {type(body).__name__}",
                status_code=status,
                endpoint=url,
            )

        if self._config.api_trace_enabled:
            _logger.debug("Response %s: %s", status, redact_for_log(body))

        return status, body
