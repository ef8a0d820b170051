"""
Access routes: what the current user may see.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from qrmfg_core.auth.authorization import default_authorization_service
from qrmfg_core.auth.dependencies import get_principal, require_roles
from qrmfg_core.domain.auth import AccessDecision, Principal, RoleType

router = APIRouter(prefix="/access", tags=["access"])


class AccessSummaryResponse(BaseModel):
    """Current user's roles and plant scope."""

    user_id: str
    username: str
    primary_role: str | None
    roles: list[str]
    is_admin: bool
    is_plant_user: bool
    plant_filtering_applies: bool
    assigned_plants: list[str]
    primary_plant: str | None


class PlantAccessResponse(BaseModel):
    """Decision for one plant code."""

    plant_code: str
    granted: bool
    reason: str


@router.get("/summary", response_model=AccessSummaryResponse)
def access_summary(principal: Principal = Depends(get_principal)):
    """Roles, plants and whether plant filtering applies to the caller."""
    return default_authorization_service.access_summary(principal)


@router.get("/plants/{plant_code}", response_model=PlantAccessResponse)
def check_plant(plant_code: str, principal: Principal = Depends(get_principal)):
    decision: AccessDecision = default_authorization_service.check_plant_access(
        principal, plant_code, data_type="plant"
    )
    return PlantAccessResponse(
        plant_code=plant_code, granted=decision.granted, reason=decision.reason
    )


@router.get("/admin/ping")
def admin_ping(principal: Principal = Depends(require_roles(RoleType.ADMIN))):
    """Reachable by administrators only."""
    return {"status": "ok", "user": principal.username}
