"""Pydantic form models for client mutations.

These models give mutations a consistent "validate → normalize → execute"
flow: a form only normalizes its input (trimming names, blank references
to ``None``); :mod:`pybusfleet.validation` applies the business rules and
:class:`pybusfleet.client.FleetClient` writes the result.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pybusfleet.models._base import blank_to_none


class _Form(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
    )


class DriverUpdateForm(_Form):
    name: str = ""
    phone_number: str = ""

    @field_validator("name", "phone_number")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    def to_fields(self) -> dict[str, Any]:
        return {"name": self.name, "phoneNumber": self.phone_number}


class NewDriverForm(DriverUpdateForm):
    """Driver account creation.

    The password is kept exactly as typed; only the name and phone number
    are trimmed.
    """

    password: str = ""


class BusForm(_Form):
    bus_number: str = ""
    assigned_driver: str | None = None
    route: str | None = None

    @field_validator("bus_number")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("assigned_driver", "route", mode="before")
    @classmethod
    def _blank_reference(cls, value: Any) -> Any:
        return blank_to_none(value)

    def to_fields(self) -> dict[str, Any]:
        return {
            "busNumber": self.bus_number,
            "assignedDriver": self.assigned_driver,
            "route": self.route,
        }


class RouteForm(_Form):
    route_name: str = ""
    from_location: str = ""
    to_location: str = ""

    @field_validator("route_name", "from_location", "to_location")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    def to_fields(self) -> dict[str, Any]:
        return {
            "routeName": self.route_name,
            "fromLocation": self.from_location,
            "toLocation": self.to_location,
        }
