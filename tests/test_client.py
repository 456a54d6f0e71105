from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest
from fleet_fakes import ADMIN_EMAIL, ADMIN_PASSWORD, FakeFleetBackend

from pybusfleet.client import FleetClient
from pybusfleet.config import FleetConfig
from pybusfleet.exceptions import (
    FleetAccountExistsError,
    FleetAuthenticationError,
    FleetDocumentNotFoundError,
    FleetError,
    FleetRateLimitError,
    FleetStoreUnavailableError,
    FleetTransportError,
    FleetValidationError,
    FleetWeakPasswordError,
)
from pybusfleet.models.forms import BusForm, DriverUpdateForm, NewDriverForm, RouteForm
from pybusfleet.notifications import MemoryNotifier, NotificationCategory
from pybusfleet.validation import MSG_INVALID_PHONE

FIXED_NOW = datetime(2026, 10, 19, 8, 30, tzinfo=UTC)


def _client(config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier) -> FleetClient:
    return FleetClient(config, transport=backend, notifier=notifier, clock=lambda: FIXED_NOW)


# ------------------------------------------------------------------
# Authentication
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_login_keeps_session_and_notifies(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        session = await client.login(f"  {ADMIN_EMAIL} ", ADMIN_PASSWORD)

        assert client.session is session
        assert session.user_id == "uid-1"
        assert session.email == ADMIN_EMAIL
        assert session.can_refresh

    assert notifier.messages() == ["Login successful!"]


@pytest.mark.asyncio
async def test_login_with_wrong_password_notifies_and_raises(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        with pytest.raises(FleetAuthenticationError):
            await client.login(ADMIN_EMAIL, "wrong-password")
        assert client.session is None

    assert notifier.messages(NotificationCategory.ERROR) == [
        "Invalid email or password. Please check your credentials."
    ]


@pytest.mark.asyncio
async def test_login_rate_limited(config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier) -> None:
    backend.identity_errors["accounts:signInWithPassword"] = (
        "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been temporarily disabled"
    )

    async with _client(config, backend, notifier) as client:
        with pytest.raises(FleetRateLimitError):
            await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)

    assert notifier.messages() == ["Too many failed attempts. Please try again later."]


@pytest.mark.asyncio
async def test_logout_forgets_session(config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier) -> None:
    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        client.logout()
        assert client.session is None

    assert notifier.messages()[-1] == "Logged out successfully"


@pytest.mark.asyncio
async def test_client_requires_context_manager(config: FleetConfig) -> None:
    client = FleetClient(config)
    with pytest.raises(FleetError, match="async with FleetClient"):
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.mark.asyncio
async def test_create_demo_account_is_idempotent(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        await client.create_demo_account()
        await client.create_demo_account()

    assert "demo@admin.com" in backend.accounts
    assert notifier.messages() == [
        "Demo account created successfully! You can now login with demo@admin.com / demo123456",
        "Demo account already exists! Use: demo@admin.com / demo123456",
    ]


@pytest.mark.asyncio
async def test_create_demo_account_failure_is_reported(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.identity_errors["accounts:signUp"] = "OPERATION_NOT_ALLOWED"

    async with _client(config, backend, notifier) as client:
        with pytest.raises(FleetAuthenticationError):
            await client.create_demo_account()

    [message] = notifier.messages(NotificationCategory.ERROR)
    assert message.startswith("Failed to create demo account: ")
    assert "OPERATION_NOT_ALLOWED" in message


# ------------------------------------------------------------------
# Collection fetches
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_fetch_collection_follows_page_tokens(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    for index in range(5):
        backend.seed("buses", f"b{index}", busNumber=f"BUS-{index:03d}")

    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        buses = await client.get_buses()

    assert [bus.id for bus in buses] == ["b0", "b1", "b2", "b3", "b4"]
    assert buses[0].bus_number == "BUS-000"
    assert backend.count("GET", "buses") == 3


@pytest.mark.asyncio
async def test_fetch_collection_returns_flat_documents(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.seed("routes", "r1", routeName="Campus Loop", fromLocation="Depot", toLocation="Campus")

    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        documents = await client.fetch_collection("routes")

    assert documents == [{"id": "r1", "routeName": "Campus Loop", "fromLocation": "Depot", "toLocation": "Campus"}]


@pytest.mark.asyncio
async def test_fetch_unknown_collection_raises_value_error(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        with pytest.raises(ValueError, match="Unknown collection"):
            await client.fetch_collection("tickets")


@pytest.mark.asyncio
async def test_fetch_without_login_is_store_unavailable(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        with pytest.raises(FleetStoreUnavailableError) as excinfo:
            await client.get_drivers()

    assert excinfo.value.collection == "drivers"
    assert isinstance(excinfo.value.__cause__, FleetAuthenticationError)


@pytest.mark.asyncio
async def test_store_outage_is_store_unavailable(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.unavailable.add("locations")

    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        with pytest.raises(FleetStoreUnavailableError) as excinfo:
            await client.get_locations()

    assert excinfo.value.collection == "locations"
    assert isinstance(excinfo.value.__cause__, FleetTransportError)
    assert excinfo.value.__cause__.status_code == 503


@pytest.mark.asyncio
async def test_rejected_token_is_refreshed_once(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.seed("buses", "b1", busNumber="BUS-001")
    backend.expire_once.add("buses")

    async with _client(config, backend, notifier) as client:
        first = await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        buses = await client.get_buses()
        assert client.session is not None
        assert client.session.id_token != first.id_token
        assert client.session.user_id == first.user_id

    assert [bus.id for bus in buses] == ["b1"]
    assert backend.count("POST", "token") == 1
    assert backend.count("GET", "buses") == 2


@pytest.mark.asyncio
async def test_expired_session_is_refreshed_before_the_call(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        client.invalidate_session()
        await client.get_routes()

    assert backend.count("POST", "token") == 1
    assert backend.count("GET", "routes") == 1


@pytest.mark.asyncio
async def test_malformed_documents_are_skipped(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.seed("buses", "b1", busNumber="BUS-001")
    backend.seed("buses", "b2", busNumber={"unexpected": "map"})
    backend.seed("buses", "b3", busNumber=101, assignedDriver="")

    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        buses = await client.get_buses()

    assert [bus.id for bus in buses] == ["b1", "b3"]
    assert buses[1].bus_number == "101"
    assert buses[1].assigned_driver is None


@pytest.mark.asyncio
async def test_undecodable_documents_are_skipped(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.seed("locations", "d1", driverId="d1", isOnline=True, lastUpdated=FIXED_NOW)
    backend.seed_wire(
        "locations",
        "d2",
        {"driverId": {"stringValue": "d2"}, "lastUpdated": {"timestampValue": "not-a-timestamp"}},
    )

    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        locations = await client.get_locations()

    assert [location.id for location in locations] == ["d1"]
    assert locations[0].last_updated == FIXED_NOW


@pytest.mark.asyncio
async def test_concurrent_calls_share_one_refresh(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        client.invalidate_session()
        await asyncio.gather(
            client.get_drivers(),
            client.get_buses(),
            client.get_routes(),
            client.get_locations(),
        )

    assert backend.count("POST", "token") == 1


# ------------------------------------------------------------------
# Drivers
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_add_driver_creates_account_driver_and_location(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    form = NewDriverForm(name=" Ann Lee ", phone_number="+1 (555) 010-2000", password="secret1")

    async with _client(config, backend, notifier) as client:
        admin = await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        driver_id = await client.add_driver(form)
        # Creating the driver account does not sign the admin out.
        assert client.session == admin

    email = "+15550102000@busapp.com"
    assert backend.accounts[email] == ("secret1", driver_id)
    assert backend.doc("drivers", driver_id) == {
        "name": "Ann Lee",
        "phoneNumber": "+1 (555) 010-2000",
        "email": email,
        "userId": driver_id,
        "createdAt": FIXED_NOW,
        "status": "active",
    }
    assert backend.doc("locations", driver_id) == {
        "driverId": driver_id,
        "driverName": "Ann Lee",
        "phoneNumber": "+1 (555) 010-2000",
        "latitude": None,
        "longitude": None,
        "lastUpdated": FIXED_NOW,
        "isOnline": False,
        "currentRoute": None,
        "currentBus": None,
    }


@pytest.mark.asyncio
async def test_add_driver_validates_before_any_request(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        calls_before = len(backend.calls)
        with pytest.raises(FleetValidationError, match=MSG_INVALID_PHONE):
            await client.add_driver(NewDriverForm(name="Ann", phone_number="call me", password="secret1"))

    assert len(backend.calls) == calls_before


@pytest.mark.asyncio
async def test_add_driver_with_registered_phone_raises_account_exists(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.add_account("5550100@busapp.com", "secret1")

    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        with pytest.raises(FleetAccountExistsError):
            await client.add_driver(NewDriverForm(name="Bo", phone_number="555-0100", password="secret1"))

    assert backend.collections["drivers"] == {}


@pytest.mark.asyncio
async def test_weak_password_rejected_by_identity_provider(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.identity_errors["accounts:signUp"] = "WEAK_PASSWORD : Password should be at least 6 characters"

    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        with pytest.raises(FleetWeakPasswordError):
            await client.add_driver(NewDriverForm(name="Bo", phone_number="5550100", password="123456"))


@pytest.mark.asyncio
async def test_update_and_delete_driver(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.seed("drivers", "d1", name="Ann", phoneNumber="5550100", email="5550100@busapp.com", status="active")

    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        await client.update_driver("d1", DriverUpdateForm(name="Ann Lee ", phone_number="5550101"))
        updated = dict(backend.doc("drivers", "d1"))
        await client.delete_driver("d1")

    assert updated == {
        "name": "Ann Lee",
        "phoneNumber": "5550101",
        "email": "5550100@busapp.com",
        "status": "active",
        "updatedAt": FIXED_NOW,
    }
    assert "d1" not in backend.collections["drivers"]


# ------------------------------------------------------------------
# Buses and routes
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_add_bus_stores_form_fields_and_creation_time(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        bus_id = await client.add_bus(BusForm(bus_number=" BUS-007 ", assigned_driver="d1", route=""))

    assert backend.doc("buses", bus_id) == {
        "busNumber": "BUS-007",
        "assignedDriver": "d1",
        "route": None,
        "createdAt": FIXED_NOW,
    }


@pytest.mark.asyncio
async def test_update_bus_only_touches_form_fields(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    backend.seed("buses", "b1", busNumber="BUS-001", assignedDriver="d9", route="r1", capacity=40)

    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        await client.update_bus("b1", BusForm(bus_number="BUS-002", assigned_driver="  ", route="r2"))

    assert backend.doc("buses", "b1") == {
        "busNumber": "BUS-002",
        "assignedDriver": None,
        "route": "r2",
        "capacity": 40,
        "updatedAt": FIXED_NOW,
    }


@pytest.mark.asyncio
async def test_update_missing_bus_raises_not_found(
    config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier
) -> None:
    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        with pytest.raises(FleetDocumentNotFoundError):
            await client.update_bus("missing", BusForm(bus_number="BUS-404"))

    assert "missing" not in backend.collections["buses"]


@pytest.mark.asyncio
async def test_route_lifecycle(config: FleetConfig, backend: FakeFleetBackend, notifier: MemoryNotifier) -> None:
    async with _client(config, backend, notifier) as client:
        await client.login(ADMIN_EMAIL, ADMIN_PASSWORD)
        route_id = await client.add_route(RouteForm(route_name="Loop", from_location="Depot", to_location="Campus"))
        await client.update_route(route_id, RouteForm(route_name="Loop A", from_location="Depot", to_location="Mall"))
        routes = await client.get_routes()
        await client.delete_route(route_id)

    assert [(route.route_name, route.to_location) for route in routes] == [("Loop A", "Mall")]
    assert routes[0].created_at == FIXED_NOW
    assert routes[0].updated_at == FIXED_NOW
    assert backend.collections["routes"] == {}
