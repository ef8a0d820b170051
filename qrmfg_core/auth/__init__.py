"""
Auth module for qrmfg.

Provides the authorization lookup, access-control errors and FastAPI
dependencies.
"""

from qrmfg_core.auth.authorization import (
    AuthorizationLookup,
    RBACAuthorizationService,
    default_authorization_service,
)
from qrmfg_core.auth.exceptions import (
    AuthenticationRequiredError,
    InsufficientRoleError,
    PlantAccessDeniedError,
    RBACError,
)

__all__ = [
    "AuthorizationLookup",
    "RBACAuthorizationService",
    "default_authorization_service",
    "AuthenticationRequiredError",
    "InsufficientRoleError",
    "PlantAccessDeniedError",
    "RBACError",
]
