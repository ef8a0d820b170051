"""
Query-side plant filtering for PostgreSQL.

Builds a WHERE fragment with the same visibility rule the result filter
applies: records without a plant are global, everything else must belong to
one of the principal's plants.

Usage:
    clause, params = plant_filter_clause(principal, lookup, "w.plant_code")
    query = sql.SQL("SELECT * FROM workflows w WHERE {}").format(clause)
    cursor.execute(query, params)
"""

from __future__ import annotations

from psycopg import sql

from qrmfg_core.auth.authorization import AuthorizationLookup, default_authorization_service
from qrmfg_core.config import settings
from qrmfg_core.domain.auth import Principal

ALWAYS_TRUE = sql.SQL("TRUE")
ALWAYS_FALSE = sql.SQL("FALSE")


def plant_filter_clause(
    principal: Principal,
    lookup: AuthorizationLookup | None = None,
    column: str | None = None,
    plant_role_only: bool = True,
) -> tuple[sql.Composable, list]:
    """Build a plant WHERE fragment and its parameters.

    Args:
        principal: The authenticated principal.
        lookup: Authorization lookup. Defaults to the shared service.
        column: Column holding the plant code; dotted names are qualified.
            Defaults to settings.DEFAULT_PLANT_FIELD.
        plant_role_only: Only restrict plant-scoped roles.

    Returns:
        (clause, params). TRUE when no filtering applies, FALSE when the
        principal has no plants.
    """
    lookup = lookup or default_authorization_service
    if not settings.PLANT_FILTERING_ENABLED or lookup.is_administrator(principal):
        return ALWAYS_TRUE, []
    if plant_role_only and not lookup.is_plant_scoped_role(principal):
        return ALWAYS_TRUE, []

    plants = sorted(lookup.allowed_plant_ids(principal))
    if not plants:
        return ALWAYS_FALSE, []

    ident = sql.Identifier(*(column or settings.DEFAULT_PLANT_FIELD).split("."))
    clause = sql.SQL("({col} IS NULL OR {col} = ANY({plants}))").format(
        col=ident, plants=sql.Placeholder()
    )
    return clause, [plants]
