"""
Authentication and authorization domain models.

This module defines the core data structures for access control:
- RoleType: The fixed set of application roles
- Principal: Authenticated actor with roles and plant assignments
- AccessDecision: Outcome of a single access check, kept for audit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


class RoleType(str, Enum):
    """Application roles. The value is the persisted role name."""

    ADMIN = "ADMIN"
    JVC_ROLE = "JVC_USER"
    CQS_ROLE = "CQS_USER"
    TECH_ROLE = "TECH_USER"
    PLANT_ROLE = "PLANT_USER"
    VIEWER_ROLE = "VIEWER"

    @property
    def role_name(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def privilege_level(self) -> int:
        """Higher number means more privileges."""
        return _PRIVILEGE_LEVELS[self]

    @property
    def is_admin(self) -> bool:
        return self is RoleType.ADMIN

    @property
    def is_plant_role(self) -> bool:
        return self is RoleType.PLANT_ROLE

    @property
    def supports_plant_filtering(self) -> bool:
        return self is RoleType.PLANT_ROLE

    def has_higher_privilege_than(self, other: RoleType | None) -> bool:
        if other is None:
            return True
        return self.privilege_level > other.privilege_level

    @classmethod
    def from_role_name(cls, role_name: str | None) -> RoleType | None:
        """Resolve a role from its stored name or a short alias.

        Matching is case-insensitive. "PLANT" and "PLANT_USER" both resolve
        to PLANT_ROLE. Unknown names return None.
        """
        if role_name is None:
            return None
        key = role_name.strip().upper()
        for role in cls:
            if role.value == key or role.name == key:
                return role
        return _ROLE_ALIASES.get(key)


_DISPLAY_NAMES = {
    RoleType.ADMIN: "Administrator",
    RoleType.JVC_ROLE: "JVC User",
    RoleType.CQS_ROLE: "CQS User",
    RoleType.TECH_ROLE: "Technical User",
    RoleType.PLANT_ROLE: "Plant User",
    RoleType.VIEWER_ROLE: "Viewer",
}

_PRIVILEGE_LEVELS = {
    RoleType.VIEWER_ROLE: 1,
    RoleType.PLANT_ROLE: 2,
    RoleType.CQS_ROLE: 3,
    RoleType.JVC_ROLE: 3,
    RoleType.TECH_ROLE: 4,
    RoleType.ADMIN: 5,
}

_ROLE_ALIASES = {
    "JVC": RoleType.JVC_ROLE,
    "CQS": RoleType.CQS_ROLE,
    "TECH": RoleType.TECH_ROLE,
    "PLANT": RoleType.PLANT_ROLE,
}


@dataclass(frozen=True)
class Principal:
    """Authenticated actor on whose behalf an operation executes.

    Built once per request by the authentication layer and never mutated.
    """

    user_id: str
    username: str
    roles: frozenset[RoleType] = frozenset()
    assigned_plants: tuple[str, ...] = ()
    primary_plant: str | None = None

    @classmethod
    def from_assignment_string(
        cls,
        user_id: str,
        username: str,
        roles: Iterable[RoleType | str],
        assigned_plants: str | None = None,
        primary_plant: str | None = None,
    ) -> Principal:
        """Build a Principal from the stored comma-separated plant column.

        Args:
            user_id: User identifier.
            username: Login name.
            roles: RoleType members or role names; unknown names are dropped.
            assigned_plants: e.g. "P1, P2,,P3".
            primary_plant: Fallback plant when no assignment exists.
        """
        resolved = set()
        for role in roles:
            role_type = role if isinstance(role, RoleType) else RoleType.from_role_name(role)
            if role_type is not None:
                resolved.add(role_type)

        plants = tuple(
            p.strip() for p in (assigned_plants or "").split(",") if p.strip()
        )
        return cls(
            user_id=user_id,
            username=username,
            roles=frozenset(resolved),
            assigned_plants=plants,
            primary_plant=primary_plant.strip() if primary_plant and primary_plant.strip() else None,
        )

    def has_role(self, role: RoleType) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return RoleType.ADMIN in self.roles

    @property
    def is_plant_user(self) -> bool:
        return RoleType.PLANT_ROLE in self.roles

    @property
    def primary_role(self) -> RoleType | None:
        """The most privileged role held, or None without roles."""
        if not self.roles:
            return None
        return max(self.roles, key=lambda r: r.privilege_level)

    @property
    def plant_codes(self) -> list[str]:
        """Assigned plants, falling back to the primary plant."""
        plants = [p.strip() for p in self.assigned_plants if p and p.strip()]
        if not plants and self.primary_plant:
            plants.append(self.primary_plant)
        return plants


@dataclass
class AccessDecision:
    """Result of an access check with the reasoning behind it."""

    granted: bool
    reason: str
    details: dict[str, Any] = field(default_factory=dict)

    def add_detail(self, key: str, value: Any) -> None:
        self.details[key] = value
