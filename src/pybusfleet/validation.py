"""Client-side form rules applied before any write reaches the store."""

from __future__ import annotations

import re

from pybusfleet._constants import DEFAULT_DRIVER_EMAIL_DOMAIN
from pybusfleet.exceptions import FleetValidationError
from pybusfleet.models.forms import BusForm, DriverUpdateForm, NewDriverForm, RouteForm

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-\(\)]+$")
MIN_PASSWORD_LENGTH = 6

_PHONE_FORMATTING = re.compile(r"[\s\-\(\)]")

MSG_FILL_ALL_FIELDS = "Please fill in all fields"
MSG_INVALID_PHONE = "Please enter a valid phone number"
MSG_SHORT_PASSWORD = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
MSG_BUS_NUMBER_REQUIRED = "Bus number is required"


def is_valid_phone(phone_number: str) -> bool:
    return bool(PHONE_PATTERN.match(phone_number.strip()))


def phone_to_email(phone_number: str, domain: str = DEFAULT_DRIVER_EMAIL_DOMAIN) -> str:
    """Derive the login email of a driver account from a phone number.

    Spaces, dashes and parentheses are removed; a leading ``+`` is kept::

        >>> phone_to_email("+1 (555) 010-2000")
        '+15550102000@busapp.com'
    """
    return f"{_PHONE_FORMATTING.sub('', phone_number.strip())}@{domain}"


def validate_driver_update(form: DriverUpdateForm) -> DriverUpdateForm:
    """Check an edit-driver form.

    Raises
    ------
    FleetValidationError
        If the name or phone number is blank.
    """
    if not form.name or not form.phone_number:
        raise FleetValidationError(MSG_FILL_ALL_FIELDS)
    return form


def validate_new_driver(form: NewDriverForm) -> NewDriverForm:
    """Check an add-driver form.

    Rules are applied in order and the first violation is reported:
    all fields present, phone number pattern, password length.
    """
    if not form.name or not form.phone_number or not form.password.strip():
        raise FleetValidationError(MSG_FILL_ALL_FIELDS)
    if not is_valid_phone(form.phone_number):
        raise FleetValidationError(MSG_INVALID_PHONE, field="phone_number")
    if len(form.password) < MIN_PASSWORD_LENGTH:
        raise FleetValidationError(MSG_SHORT_PASSWORD, field="password")
    return form


def validate_bus(form: BusForm) -> BusForm:
    if not form.bus_number:
        raise FleetValidationError(MSG_BUS_NUMBER_REQUIRED, field="bus_number")
    return form


def validate_route(form: RouteForm) -> RouteForm:
    if not form.route_name or not form.from_location or not form.to_location:
        raise FleetValidationError(MSG_FILL_ALL_FIELDS)
    return form
