"""High-level async client for the fleet document store."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

import aiohttp
from pydantic import ValidationError

from pybusfleet._api import auth as _auth_api
from pybusfleet._api import documents as _documents_api
from pybusfleet._constants import BUSES, COLLECTIONS, DRIVERS, LOCATIONS, ROUTES
from pybusfleet._transport import JsonTransport, Transport
from pybusfleet.config import FleetConfig
from pybusfleet.exceptions import (
    FleetAccountExistsError,
    FleetApiError,
    FleetAuthenticationError,
    FleetError,
    FleetRateLimitError,
    FleetSessionExpiredError,
    FleetStoreUnavailableError,
    FleetTransportError,
)
from pybusfleet.models._base import FleetDocument
from pybusfleet.models.entities import Bus, Driver, Location, Route
from pybusfleet.models.forms import BusForm, DriverUpdateForm, NewDriverForm, RouteForm
from pybusfleet.notifications import LoggingNotifier, Notifier
from pybusfleet.session import Session
from pybusfleet.validation import (
    phone_to_email,
    validate_bus,
    validate_driver_update,
    validate_new_driver,
    validate_route,
)

_logger = logging.getLogger(__name__)

T = TypeVar("T")
TDocument = TypeVar("TDocument", bound=FleetDocument)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FleetClient:
    """Async client for the fleet document store and identity provider.

    Usage::

        async with FleetClient(config) as client:
            await client.login("admin@example.com", "secret")
            buses = await client.get_buses()
    """

    def __init__(
        self,
        config: FleetConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._external_transport = transport is not None
        self._transport: Transport | None = transport
        self._session: Session | None = None
        self._refresh_lock = asyncio.Lock()
        self._notifier = notifier or LoggingNotifier()
        self._clock = clock

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetClient:
        if not self._external_transport:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = JsonTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    @property
    def config(self) -> FleetConfig:
        return self._config

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session | None:
        """The signed-in session, or ``None``."""
        return self._session

    async def login(self, email: str, password: str) -> Session:
        """Sign in an administrator and keep the session for later calls.

        Failures are reported through the notifier and re-raised.
        """
        transport = self._require_transport()
        try:
            session = await _auth_api.sign_in(self._config, transport, email.strip(), password)
        except FleetRateLimitError:
            self._notifier.error("Too many failed attempts. Please try again later.")
            raise
        except FleetAuthenticationError:
            self._notifier.error("Invalid email or password. Please check your credentials.")
            raise
        except FleetError as exc:
            self._notifier.error(str(exc) or "Login failed")
            raise
        self._session = session
        _logger.info("Signed in as %s", session.email or session.user_id)
        self._notifier.success("Login successful!")
        return session

    def logout(self) -> None:
        """Forget the current session."""
        self._session = None
        self._notifier.success("Logged out successfully")

    async def ensure_session(self) -> Session:
        """Return an active session, refreshing the id token if it expired.

        Raises
        ------
        FleetAuthenticationError
            If nobody is signed in or the refresh was rejected.
        """
        session = self._session
        if session is None:
            raise FleetAuthenticationError("Not signed in. Call login() first.")
        if not session.is_expired:
            return session
        # Concurrent callers share one refresh.
        async with self._refresh_lock:
            session = self._session
            if session is None:
                raise FleetAuthenticationError("Not signed in. Call login() first.")
            if session.is_expired:
                _logger.debug("Session expired after %.0fs; refreshing", session.age)
                session = await _auth_api.refresh(self._config, self._require_transport(), session)
                self._session = session
            return session

    def invalidate_session(self) -> None:
        """Mark the id token as expired so the next call refreshes it."""
        if self._session is not None:
            self._session = self._session.model_copy(update={"ttl": 0.0})

    async def create_demo_account(self) -> None:
        """Create the demo administrator account.

        An already existing demo account counts as success.
        """
        demo = self._config.demo
        credentials = f"{demo.email} / {demo.password}"
        try:
            await _auth_api.sign_up(self._config, self._require_transport(), demo.email, demo.password)
        except FleetAccountExistsError:
            self._notifier.success(f"Demo account already exists! Use: {credentials}")
            return
        except FleetError as exc:
            self._notifier.error(f"Failed to create demo account: {exc}")
            raise
        self._notifier.success(f"Demo account created successfully! You can now login with {credentials}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise FleetError("Client not initialized. Use 'async with FleetClient(...) as client:'")
        return self._transport

    async def _call_with_reauth(self, fn: Callable[[Session, Transport], Awaitable[T]]) -> T:
        """Run a store call, retrying once with a refreshed token on expiry."""
        transport = self._require_transport()
        session = await self.ensure_session()
        try:
            return await fn(session, transport)
        except FleetSessionExpiredError:
            _logger.debug("Store rejected the id token; refreshing and retrying once")
            if self._session is session:
                self.invalidate_session()
            session = await self.ensure_session()
            return await fn(session, transport)

    @staticmethod
    def _parse(model: type[TDocument], collection: str, documents: list[dict[str, Any]]) -> list[TDocument]:
        parsed: list[TDocument] = []
        for document in documents:
            try:
                parsed.append(model.model_validate(document))
            except ValidationError:
                _logger.warning("Skipping malformed %s document %s", collection, document.get("id"), exc_info=True)
        return parsed

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def fetch_collection(self, name: str) -> list[dict[str, Any]]:
        """Fetch every document of a collection as ``{"id": ..., **fields}``.

        Raises
        ------
        ValueError
            If *name* is not one of the fleet collections.
        FleetStoreUnavailableError
            On any network, authentication or store failure.
        """
        if name not in COLLECTIONS:
            raise ValueError(f"Unknown collection {name!r}; expected one of {sorted(COLLECTIONS)}")

        async def _call(session: Session, transport: Transport) -> list[dict[str, Any]]:
            return await _documents_api.list_documents(self._config, session, transport, name)

        try:
            return await self._call_with_reauth(_call)
        except (FleetTransportError, FleetApiError) as exc:
            raise FleetStoreUnavailableError(f"Failed to fetch {name}: {exc}", collection=name) from exc

    async def get_drivers(self) -> list[Driver]:
        return self._parse(Driver, DRIVERS, await self.fetch_collection(DRIVERS))

    async def get_buses(self) -> list[Bus]:
        return self._parse(Bus, BUSES, await self.fetch_collection(BUSES))

    async def get_routes(self) -> list[Route]:
        return self._parse(Route, ROUTES, await self.fetch_collection(ROUTES))

    async def get_locations(self) -> list[Location]:
        return self._parse(Location, LOCATIONS, await self.fetch_collection(LOCATIONS))

    # ------------------------------------------------------------------
    # Drivers
    # ------------------------------------------------------------------

    async def add_driver(self, form: NewDriverForm) -> str:
        """Create a driver account, its driver document and its location.

        The driver signs in with an email derived from the phone number.
        Returns the new driver id (the account's user id).

        Raises
        ------
        FleetValidationError
            Before any network call, if the form breaks a rule.
        FleetAccountExistsError
            If a driver with this phone number already has an account.
        """
        validate_new_driver(form)
        transport = self._require_transport()
        email = phone_to_email(form.phone_number, self._config.driver_email_domain)
        account = await _auth_api.sign_up(self._config, transport, email, form.password)
        driver_id = account.user_id
        now = self._clock()

        async def _call(session: Session, transport: Transport) -> None:
            await _documents_api.set_document(
                self._config,
                session,
                transport,
                DRIVERS,
                driver_id,
                {
                    **form.to_fields(),
                    "email": email,
                    "userId": driver_id,
                    "createdAt": now,
                    "status": "active",
                },
            )
            await _documents_api.set_document(
                self._config,
                session,
                transport,
                LOCATIONS,
                driver_id,
                {
                    "driverId": driver_id,
                    "driverName": form.name,
                    "phoneNumber": form.phone_number,
                    "latitude": None,
                    "longitude": None,
                    "lastUpdated": now,
                    "isOnline": False,
                    "currentRoute": None,
                    "currentBus": None,
                },
            )

        await self._call_with_reauth(_call)
        _logger.info("Created driver %s (%s)", driver_id, email)
        return driver_id

    async def update_driver(self, driver_id: str, form: DriverUpdateForm) -> None:
        validate_driver_update(form)
        await self._update(DRIVERS, driver_id, form.to_fields())

    async def delete_driver(self, driver_id: str) -> None:
        await self._delete(DRIVERS, driver_id)

    # ------------------------------------------------------------------
    # Buses
    # ------------------------------------------------------------------

    async def add_bus(self, form: BusForm) -> str:
        validate_bus(form)
        return await self._create(BUSES, form.to_fields())

    async def update_bus(self, bus_id: str, form: BusForm) -> None:
        validate_bus(form)
        await self._update(BUSES, bus_id, form.to_fields())

    async def delete_bus(self, bus_id: str) -> None:
        await self._delete(BUSES, bus_id)

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    async def add_route(self, form: RouteForm) -> str:
        validate_route(form)
        return await self._create(ROUTES, form.to_fields())

    async def update_route(self, route_id: str, form: RouteForm) -> None:
        validate_route(form)
        await self._update(ROUTES, route_id, form.to_fields())

    async def delete_route(self, route_id: str) -> None:
        await self._delete(ROUTES, route_id)

    # ------------------------------------------------------------------
    # Single-document writes
    # ------------------------------------------------------------------

    async def _create(self, collection: str, fields: dict[str, Any]) -> str:
        payload = {**fields, "createdAt": self._clock()}

        async def _call(session: Session, transport: Transport) -> str:
            return await _documents_api.create_document(self._config, session, transport, collection, payload)

        doc_id = await self._call_with_reauth(_call)
        _logger.debug("Created %s/%s", collection, doc_id)
        return doc_id

    async def _update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        payload = {**fields, "updatedAt": self._clock()}

        async def _call(session: Session, transport: Transport) -> None:
            await _documents_api.update_document(self._config, session, transport, collection, doc_id, payload)

        await self._call_with_reauth(_call)
        _logger.debug("Updated %s/%s", collection, doc_id)

    async def _delete(self, collection: str, doc_id: str) -> None:
        async def _call(session: Session, transport: Transport) -> None:
            await _documents_api.delete_document(self._config, session, transport, collection, doc_id)

        await self._call_with_reauth(_call)
        _logger.debug("Deleted %s/%s", collection, doc_id)
