"""Explicit load entry points for the admin console.

:class:`FleetConsole` composes the client with the resolver and the
aggregation engine. Each ``load_*`` call fetches the collections a view
needs concurrently, computes the view once all of them have arrived, and
settles the view's :class:`ViewState`.

Loads are numbered per view. A load only settles its view if no newer
load of the same view was issued meanwhile, so a slow, superseded
request can never overwrite fresher data. A failed load keeps the last
good value and reports through the notifier.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Generic, TypeVar

from pybusfleet.aggregation import ReportDateRange, compute_dashboard_stats, compute_report_stats, export_report_csv
from pybusfleet.client import FleetClient
from pybusfleet.exceptions import (
    FleetAccountExistsError,
    FleetError,
    FleetValidationError,
    FleetWeakPasswordError,
)
from pybusfleet.models.entities import Route
from pybusfleet.models.forms import BusForm, DriverUpdateForm, NewDriverForm, RouteForm
from pybusfleet.models.views import BusView, DashboardStats, DriverView, ReportStats
from pybusfleet.notifications import Notifier
from pybusfleet.resolver import resolve_bus_view, resolve_driver_view

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoadStatus(StrEnum):
    COMPUTING = "computing"
    SETTLED = "settled"


@dataclass
class ViewState(Generic[T]):
    """Last-known-good value of one console view."""

    name: str
    value: T | None = None
    status: LoadStatus = LoadStatus.SETTLED
    last_error: FleetError | None = None
    generation: int = 0
    """Number of the most recently issued load."""
    settled_generation: int = 0
    """Number of the load that last settled this view."""

    @property
    def loading(self) -> bool:
        return self.status == LoadStatus.COMPUTING


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    """Outcome of a single load call.

    ``stale`` is set when a newer load of the same view was issued before
    this one finished; its value (or error) was then not applied.
    """

    value: T | None = None
    error: FleetError | None = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class _Views:
    buses: ViewState[list[BusView]] = field(default_factory=lambda: ViewState("buses"))
    drivers: ViewState[list[DriverView]] = field(default_factory=lambda: ViewState("drivers"))
    routes: ViewState[list[Route]] = field(default_factory=lambda: ViewState("routes"))
    dashboard: ViewState[DashboardStats] = field(default_factory=lambda: ViewState("dashboard"))
    report: ViewState[ReportStats] = field(default_factory=lambda: ViewState("report"))


class FleetConsole:
    """Load, compute and mutate console views on top of a :class:`FleetClient`."""

    def __init__(
        self,
        client: FleetClient,
        notifier: Notifier | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._notifier = notifier or client.notifier
        self._clock = clock
        self.views = _Views()

    # ------------------------------------------------------------------
    # Load plumbing
    # ------------------------------------------------------------------

    async def _load(
        self,
        state: ViewState[T],
        compute: Callable[[], Awaitable[T]],
        failure_message: str,
    ) -> LoadResult[T]:
        state.generation += 1
        generation = state.generation
        state.status = LoadStatus.COMPUTING

        try:
            value = await compute()
        except FleetError as exc:
            if generation != state.generation:
                _logger.debug("Ignoring failure of superseded %s load #%d", state.name, generation)
                return LoadResult(error=exc, stale=True)
            _logger.warning("Loading %s failed: %s", state.name, exc)
            state.status = LoadStatus.SETTLED
            state.last_error = exc
            self._notifier.error(failure_message)
            return LoadResult(error=exc)
        except BaseException:
            # Unexpected errors propagate, but the view must not stay computing.
            if generation == state.generation:
                state.status = LoadStatus.SETTLED
            raise

        if generation != state.generation:
            _logger.debug("Discarding superseded %s load #%d (latest #%d)", state.name, generation, state.generation)
            return LoadResult(value=value, stale=True)

        state.value = value
        state.last_error = None
        state.settled_generation = generation
        state.status = LoadStatus.SETTLED
        return LoadResult(value=value)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    async def load_bus_view(self) -> LoadResult[list[BusView]]:
        async def _compute() -> list[BusView]:
            buses, drivers, routes = await asyncio.gather(
                self._client.get_buses(),
                self._client.get_drivers(),
                self._client.get_routes(),
            )
            return resolve_bus_view(buses, drivers, routes)

        return await self._load(self.views.buses, _compute, "Failed to fetch data")

    async def load_driver_view(self) -> LoadResult[list[DriverView]]:
        async def _compute() -> list[DriverView]:
            drivers, buses = await asyncio.gather(self._client.get_drivers(), self._client.get_buses())
            return resolve_driver_view(drivers, buses)

        return await self._load(self.views.drivers, _compute, "Failed to fetch drivers")

    async def load_routes(self) -> LoadResult[list[Route]]:
        return await self._load(self.views.routes, self._client.get_routes, "Failed to fetch routes")

    async def load_dashboard(self) -> LoadResult[DashboardStats]:
        async def _compute() -> DashboardStats:
            drivers, buses, routes, locations = await asyncio.gather(
                self._client.get_drivers(),
                self._client.get_buses(),
                self._client.get_routes(),
                self._client.get_locations(),
            )
            now = self._clock() if self._clock is not None else None
            return compute_dashboard_stats(drivers, buses, routes, locations, now)

        return await self._load(self.views.dashboard, _compute, "Failed to load dashboard statistics")

    async def load_report(self) -> LoadResult[ReportStats]:
        async def _compute() -> ReportStats:
            drivers, buses, routes = await asyncio.gather(
                self._client.get_drivers(),
                self._client.get_buses(),
                self._client.get_routes(),
            )
            return compute_report_stats(drivers, buses, routes)

        return await self._load(self.views.report, _compute, "Failed to fetch report data")

    def export_report(self, date_range: ReportDateRange | None = None) -> str | None:
        """Return the CSV export of the last settled report, if any."""
        stats = self.views.report.value
        if stats is None:
            self._notifier.warning("No report data to export")
            return None
        generated_at = self._clock() if self._clock is not None else None
        if date_range is None and generated_at is not None:
            date_range = ReportDateRange.last_days(today=generated_at.date())
        csv_text = export_report_csv(stats, date_range, generated_at)
        self._notifier.success("Report exported successfully")
        return csv_text

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _mutate(
        self,
        operation: Awaitable[object],
        success_message: str,
        failure_message: Callable[[FleetError], str],
        reload: Callable[[], Awaitable[object]] | None = None,
    ) -> bool:
        try:
            await operation
        except FleetValidationError as exc:
            self._notifier.error(str(exc))
            return False
        except FleetError as exc:
            _logger.warning("Mutation failed: %s", exc)
            self._notifier.error(failure_message(exc))
            return False
        self._notifier.success(success_message)
        if reload is not None:
            await reload()
        return True

    @staticmethod
    def _fixed(message: str) -> Callable[[FleetError], str]:
        return lambda _exc: message

    @staticmethod
    def _add_driver_failure(exc: FleetError) -> str:
        if isinstance(exc, FleetAccountExistsError):
            return "A driver with this phone number already exists"
        if isinstance(exc, FleetWeakPasswordError):
            return "Password is too weak. Please choose a stronger password"
        return f"Failed to add driver: {exc}"

    async def add_driver(self, form: NewDriverForm) -> bool:
        return await self._mutate(
            self._client.add_driver(form),
            "Driver added successfully! Driver can now login with their phone number.",
            self._add_driver_failure,
            self.load_driver_view,
        )

    async def update_driver(self, driver_id: str, form: DriverUpdateForm) -> bool:
        return await self._mutate(
            self._client.update_driver(driver_id, form),
            "Driver updated successfully",
            self._fixed("Failed to update driver"),
            self.load_driver_view,
        )

    async def delete_driver(self, driver_id: str) -> bool:
        return await self._mutate(
            self._client.delete_driver(driver_id),
            "Driver deleted successfully",
            self._fixed("Failed to delete driver"),
            self.load_driver_view,
        )

    async def add_bus(self, form: BusForm) -> bool:
        return await self._mutate(
            self._client.add_bus(form),
            "Bus added successfully",
            self._fixed("Failed to add bus"),
            self.load_bus_view,
        )

    async def update_bus(self, bus_id: str, form: BusForm) -> bool:
        return await self._mutate(
            self._client.update_bus(bus_id, form),
            "Bus updated successfully",
            self._fixed("Failed to update bus"),
            self.load_bus_view,
        )

    async def delete_bus(self, bus_id: str) -> bool:
        return await self._mutate(
            self._client.delete_bus(bus_id),
            "Bus deleted successfully",
            self._fixed("Failed to delete bus"),
            self.load_bus_view,
        )

    async def add_route(self, form: RouteForm) -> bool:
        return await self._mutate(
            self._client.add_route(form),
            "Route added successfully",
            self._fixed("Failed to add route"),
            self.load_routes,
        )

    async def update_route(self, route_id: str, form: RouteForm) -> bool:
        return await self._mutate(
            self._client.update_route(route_id, form),
            "Route updated successfully",
            self._fixed("Failed to update route"),
            self.load_routes,
        )

    async def delete_route(self, route_id: str) -> bool:
        return await self._mutate(
            self._client.delete_route(route_id),
            "Route deleted successfully",
            self._fixed("Failed to delete route"),
            self.load_routes,
        )
