"""Data models for store documents and derived views."""

from pybusfleet.models._base import FleetDocument, FleetModel
from pybusfleet.models.entities import Bus, Driver, Location, Route
from pybusfleet.models.forms import BusForm, DriverUpdateForm, NewDriverForm, RouteForm
from pybusfleet.models.views import BusView, DashboardStats, DriverView, ReportStats

__all__ = [
    "Bus",
    "BusForm",
    "BusView",
    "DashboardStats",
    "Driver",
    "DriverUpdateForm",
    "DriverView",
    "FleetDocument",
    "FleetModel",
    "Location",
    "NewDriverForm",
    "ReportStats",
    "Route",
    "RouteForm",
]
