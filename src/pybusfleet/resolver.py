"""Cross-entity reference resolution.

Buses reference drivers and routes by id. The references are never
validated by the store, so a referent may have been deleted; resolution
then degrades to :data:`UNASSIGNED` (bus view) or ``None`` (driver view)
instead of failing.

All functions are pure: inputs are never mutated and output order follows
the order of the primary input sequence.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pybusfleet.models.entities import Bus, Driver, Route
from pybusfleet.models.views import BusView, DriverView

#: Display name used when a reference is absent or dangling.
UNASSIGNED = "Unassigned"


def _display_name(name: str | None) -> str:
    return name or UNASSIGNED


def resolve_bus_view(
    buses: Sequence[Bus],
    drivers: Iterable[Driver],
    routes: Iterable[Route],
) -> list[BusView]:
    """Attach driver and route display names to every bus."""
    driver_names = {driver.id: driver.name for driver in drivers}
    route_names = {route.id: route.route_name for route in routes}

    views: list[BusView] = []
    for bus in buses:
        driver_name = driver_names.get(bus.assigned_driver) if bus.assigned_driver else None
        route_name = route_names.get(bus.route) if bus.route else None
        views.append(
            BusView(
                id=bus.id,
                bus_number=bus.bus_number,
                driver_display_name=_display_name(driver_name),
                route_display_name=_display_name(route_name),
            )
        )
    return views


def first_bus_by_driver(buses: Iterable[Bus]) -> dict[str, Bus]:
    """Map each driver id to the first bus (in input order) assigned to it.

    Several buses may name the same driver; later ones are ignored.
    """
    assignments: dict[str, Bus] = {}
    for bus in buses:
        if bus.assigned_driver and bus.assigned_driver not in assignments:
            assignments[bus.assigned_driver] = bus
    return assignments


def resolve_driver_view(drivers: Sequence[Driver], buses: Sequence[Bus]) -> list[DriverView]:
    """Attach the first assigned bus (id and number) to every driver."""
    assignments = first_bus_by_driver(buses)

    views: list[DriverView] = []
    for driver in drivers:
        bus = assignments.get(driver.id)
        views.append(
            DriverView(
                id=driver.id,
                name=driver.name,
                phone_number=driver.phone_number,
                assigned_bus_id=bus.id if bus is not None else None,
                assigned_bus_number=bus.bus_number if bus is not None else None,
            )
        )
    return views


# ------------------------------------------------------------------
# Client-side search
# ------------------------------------------------------------------


def _matches(term: str, *candidates: str) -> bool:
    return any(term in candidate.lower() for candidate in candidates)


def filter_bus_views(views: Iterable[BusView], term: str) -> list[BusView]:
    """Keep bus views whose number, driver or route contains *term*."""
    needle = term.strip().lower()
    return [
        view
        for view in views
        if _matches(needle, view.bus_number, view.driver_display_name, view.route_display_name)
    ]


def filter_driver_views(views: Iterable[DriverView], term: str) -> list[DriverView]:
    """Keep drivers whose name (any case) or phone number contains *term*."""
    raw = term.strip()
    needle = raw.lower()
    return [view for view in views if needle in view.name.lower() or raw in view.phone_number]


def filter_routes(routes: Iterable[Route], term: str) -> list[Route]:
    """Keep routes whose name or endpoints contain *term*."""
    needle = term.strip().lower()
    return [
        route
        for route in routes
        if _matches(needle, route.route_name, route.from_location, route.to_location)
    ]
