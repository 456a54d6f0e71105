"""Denormalized views and aggregate statistics exposed to the console."""

from __future__ import annotations

from pybusfleet.metrics import utilization
from pybusfleet.models._base import FleetModel


class BusView(FleetModel):
    """A bus with its driver and route references resolved to display names."""

    id: str
    bus_number: str
    driver_display_name: str
    route_display_name: str


class DriverView(FleetModel):
    """A driver with the first bus assigned to them, if any.

    ``assigned_bus_id`` and ``assigned_bus_number`` are both ``None``
    when no bus references the driver.
    """

    id: str
    name: str
    phone_number: str
    assigned_bus_id: str | None = None
    assigned_bus_number: str | None = None

    @property
    def has_bus(self) -> bool:
        return self.assigned_bus_id is not None


class DashboardStats(FleetModel):
    """Fleet-wide counts shown on the dashboard."""

    total_drivers: int = 0
    total_buses: int = 0
    total_routes: int = 0
    active_today: int = 0

    @property
    def active_today_utilization(self) -> int:
        """Share of drivers online today, as a rounded percentage."""
        return utilization(self.active_today, self.total_drivers)


class ReportStats(FleetModel):
    """Assignment statistics shown on the reports page and exported to CSV."""

    total_drivers: int = 0
    total_buses: int = 0
    total_routes: int = 0
    active_drivers: int = 0
    assigned_buses: int = 0

    @property
    def unassigned_buses(self) -> int:
        return self.total_buses - self.assigned_buses

    @property
    def driver_utilization(self) -> int:
        return utilization(self.active_drivers, self.total_drivers)

    @property
    def fleet_utilization(self) -> int:
        return utilization(self.assigned_buses, self.total_buses)

    def summary_lines(self) -> list[str]:
        """Human-readable system summary, one sentence per line."""
        return [
            f"Driver Utilization: {self.active_drivers} out of {self.total_drivers} drivers are "
            f"currently assigned to buses ({self.driver_utilization}% utilization).",
            f"Fleet Status: {self.assigned_buses} out of {self.total_buses} buses have assigned "
            f"drivers ({self.fleet_utilization}% assigned).",
            f"Route Coverage: The system currently manages {self.total_routes} routes across the network.",
        ]
