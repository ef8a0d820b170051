"""
Declarative plant filter policy.

A PlantFilterPolicy is attached once to a protected operation and describes
whether and how its results are reduced to the caller's plants.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, field_validator


class ResultShape(str, Enum):
    """Container kind of an operation result."""

    AUTO = "auto"
    SINGLE = "single"
    SEQUENCE = "sequence"
    PAGE = "page"


class PlantFilterPolicy(BaseModel):
    """Configuration for plant-based result filtering.

    Attributes:
        required: Deny on failure when True; pass results through on
            failure when False.
        restrict_to_plant_scoped_roles: Filter only principals whose role is
            plant-scoped. When False every non-admin principal is filtered.
        result_shape: Shape of the result, or AUTO to detect at runtime.
        field_path: Dotted path to the plant identifier on each record.
            None means settings.DEFAULT_PLANT_FIELD.
        error_message: Message for filtering failures. Empty means default.
    """

    required: bool = True
    restrict_to_plant_scoped_roles: bool = True
    result_shape: ResultShape = ResultShape.AUTO
    field_path: str | None = None
    error_message: str = ""

    model_config = {"frozen": True}

    @field_validator("field_path")
    @classmethod
    def _validate_field_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value or any(not part.strip() for part in value.split(".")):
            raise ValueError(f"Invalid field path: {value!r}")
        return value


DEFAULT_FILTER_ERROR_MESSAGE = "Failed to apply plant-based data filtering"
