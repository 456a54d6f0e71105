"""Base model for store documents.

Every entity model inherits from :class:`FleetDocument` which provides:

* ``alias_generator=to_camel`` so camelCase document fields map
  automatically to snake_case attributes.
* An ``id`` field carrying the document identifier.
* A ``model_validator(mode="before")`` that drops ``None`` values so
  the field default is used, and stashes the original document in
  ``raw``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def blank_to_none(value: Any) -> Any:
    """Normalise an optional reference: blank strings mean "no reference"."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class FleetModel(BaseModel):
    """Base for exposed, immutable value objects (views and stats)."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class FleetDocument(BaseModel):
    """Base for documents fetched from the store."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        coerce_numbers_to_str=True,
    )

    id: str
    """Opaque document identifier assigned by the store."""

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original document fields as decoded from the store."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
