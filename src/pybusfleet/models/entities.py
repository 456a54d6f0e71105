"""Entity models for the four store collections."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import field_validator

from pybusfleet.models._base import FleetDocument, blank_to_none


class Driver(FleetDocument):
    """A driver account (``drivers`` collection).

    The document id equals the driver's identity provider user id.
    """

    name: str = ""
    phone_number: str = ""
    email: str = ""
    user_id: str | None = None
    status: str = "active"
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Bus(FleetDocument):
    """A bus (``buses`` collection).

    ``assigned_driver`` and ``route`` are unvalidated references: the
    referenced driver or route may no longer exist.
    """

    bus_number: str = ""
    assigned_driver: str | None = None
    """Driver id, or ``None`` when unassigned."""
    route: str | None = None
    """Route id, or ``None`` when unassigned."""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("assigned_driver", "route", mode="before")
    @classmethod
    def _blank_reference(cls, value: Any) -> Any:
        return blank_to_none(value)


class Route(FleetDocument):
    """A route between two named locations (``routes`` collection)."""

    route_name: str = ""
    from_location: str = ""
    to_location: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def label(self) -> str:
        return f"{self.route_name} ({self.from_location} → {self.to_location})"


class Location(FleetDocument):
    """Last reported position of a driver (``locations`` collection).

    One document per driver, keyed by the driver id, but nothing
    enforces that the driver still exists.
    """

    driver_id: str = ""
    driver_name: str = ""
    phone_number: str = ""
    latitude: float | None = None
    longitude: float | None = None
    last_updated: datetime | None = None
    is_online: bool = False
    current_route: str | None = None
    current_bus: str | None = None

    @field_validator("current_route", "current_bus", mode="before")
    @classmethod
    def _blank_reference(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator("is_online", mode="before")
    @classmethod
    def _strict_online(cls, value: Any) -> bool:
        # Only a literal boolean true counts as online.
        return value is True
