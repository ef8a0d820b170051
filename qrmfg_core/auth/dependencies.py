"""
FastAPI dependencies for authorization.

Provides dependency injection for:
- Extracting the authenticated Principal from requests
- Requiring specific roles for endpoints
"""

from __future__ import annotations

from fastapi import Depends, Request

from qrmfg_core.auth.exceptions import AuthenticationRequiredError
from qrmfg_core.domain.auth import Principal, RoleType
from qrmfg_core.filtering.roles import check_roles


def get_principal(request: Request) -> Principal:
    """Get the principal attached to request.state by the auth layer.

    Raises:
        AuthenticationRequiredError: If the request is not authenticated.
    """
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise AuthenticationRequiredError("Not authenticated")
    return principal


def require_roles(*roles: RoleType, require_all: bool = False, allow_admin_bypass: bool = True):
    """Dependency factory to require roles.

    Usage:
        @router.get("/cqs/queue")
        def queue(principal: Principal = Depends(require_roles(RoleType.CQS_ROLE))):
            ...
    """

    def _check_roles(principal: Principal = Depends(get_principal)) -> Principal:
        check_roles(
            principal,
            roles,
            require_all=require_all,
            allow_admin_bypass=allow_admin_bypass,
            resource="endpoint",
        )
        return principal

    return _check_roles
