"""
Plant-scoped data filtering.

- PlantDataFilter / plant_data_filter: filter operation results by plant
- FieldExtractor: resolve a record's plant identifier by dotted path
- plant_filter_clause: the same rule as a SQL WHERE fragment
- require_role: method-level role guard
"""

from .extractor import FieldExtractor, default_field_extractor
from .interceptor import (
    PlantDataFilter,
    default_plant_data_filter,
    detect_shape,
    plant_data_filter,
    with_plant_filter,
)
from .query import plant_filter_clause
from .roles import check_roles, require_role

__all__ = [
    "FieldExtractor",
    "default_field_extractor",
    "PlantDataFilter",
    "default_plant_data_filter",
    "detect_shape",
    "plant_data_filter",
    "with_plant_filter",
    "plant_filter_clause",
    "check_roles",
    "require_role",
]
