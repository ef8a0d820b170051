"""
Authorization lookup for plant-scoped access decisions.

The filtering layer only depends on the AuthorizationLookup protocol. The
default RBACAuthorizationService answers from the Principal itself; a
deployment that keeps plant assignments elsewhere can pass its own lookup.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from loguru import logger

from qrmfg_core.domain.auth import AccessDecision, Principal


@runtime_checkable
class AuthorizationLookup(Protocol):
    """Protocol for the questions the plant filter asks about a principal."""

    def is_administrator(self, principal: Principal) -> bool:
        """Whether the principal bypasses plant filtering."""
        ...

    def is_plant_scoped_role(self, principal: Principal) -> bool:
        """Whether the principal's role is inherently restricted to plants."""
        ...

    def allowed_plant_ids(self, principal: Principal) -> set[str]:
        """Plant identifiers the principal may see."""
        ...


class RBACAuthorizationService:
    """Default AuthorizationLookup backed by the Principal's own fields."""

    def is_administrator(self, principal: Principal) -> bool:
        return principal.is_admin

    def is_plant_scoped_role(self, principal: Principal) -> bool:
        return any(role.supports_plant_filtering for role in principal.roles)

    def allowed_plant_ids(self, principal: Principal) -> set[str]:
        return set(principal.plant_codes)

    def should_apply_plant_filtering(self, principal: Principal) -> bool:
        if self.is_administrator(principal):
            return False
        return self.is_plant_scoped_role(principal)

    def has_plant_data_access(self, principal: Principal, plant_code: str | None) -> bool:
        """Check a single plant code against the principal's assignments.

        Args:
            principal: The authenticated principal.
            plant_code: Plant code attached to the data.

        Returns:
            False for a blank code. True when the principal is not subject to
            plant filtering. Otherwise whether the code is assigned.
        """
        if plant_code is None or not plant_code.strip():
            return False
        if not self.should_apply_plant_filtering(principal):
            return True
        return plant_code.strip() in self.allowed_plant_ids(principal)

    def check_plant_access(
        self,
        principal: Principal,
        plant_code: str | None,
        data_type: str = "data",
    ) -> AccessDecision:
        """Make and log an access decision for data owned by one plant.

        Records without a plant code are visible to everyone.
        """
        allowed = self.allowed_plant_ids(principal)
        if self.is_administrator(principal):
            decision = AccessDecision(True, "Administrator access")
        elif not self.is_plant_scoped_role(principal):
            decision = AccessDecision(True, "Role is not plant-scoped")
        elif plant_code is None:
            decision = AccessDecision(True, "Record is not plant-scoped")
        elif plant_code in allowed:
            decision = AccessDecision(True, "Plant assigned to user")
        else:
            decision = AccessDecision(False, "Plant not assigned to user")

        decision.add_detail("plant_code", plant_code)
        decision.add_detail("assigned_plants", sorted(allowed))
        self.log_data_access(principal, data_type, plant_code, decision)
        return decision

    def log_data_access(
        self,
        principal: Principal,
        data_type: str,
        plant_code: str | None,
        decision: AccessDecision,
    ) -> None:
        bound = logger.bind(
            audit=True,
            user_id=principal.user_id,
            data_type=data_type,
            plant_code=plant_code,
            granted=decision.granted,
        )
        if decision.granted:
            bound.debug(f"Data access granted to {principal.username} for {data_type}: {decision.reason}")
        else:
            bound.warning(f"Data access denied to {principal.username} for {data_type}: {decision.reason}")

    def access_summary(self, principal: Principal) -> dict[str, Any]:
        """Summarize what the principal can see, for display in the UI."""
        primary = principal.primary_role
        return {
            "user_id": principal.user_id,
            "username": principal.username,
            "primary_role": primary.role_name if primary else None,
            "roles": sorted(role.role_name for role in principal.roles),
            "is_admin": self.is_administrator(principal),
            "is_plant_user": self.is_plant_scoped_role(principal),
            "plant_filtering_applies": self.should_apply_plant_filtering(principal),
            "assigned_plants": sorted(self.allowed_plant_ids(principal)),
            "primary_plant": principal.primary_plant,
        }


default_authorization_service = RBACAuthorizationService()
