"""
FastAPI auth middleware.

Builds the request Principal from identity headers set by the upstream
gateway and attaches it to request.state.principal:

    X-User-Id          user identifier (required)
    X-User-Name        display name (defaults to the user id)
    X-User-Roles       comma-separated role names ("PLANT_USER,VIEWER")
    X-User-Plants      comma-separated assigned plant codes
    X-Primary-Plant    single fallback plant code
"""

from __future__ import annotations

import uuid

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from qrmfg_core.auth.exceptions import AuthenticationRequiredError
from qrmfg_core.domain.auth import Principal, RoleType

# Endpoints that don't require authentication
PUBLIC_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})

DEV_PRINCIPAL = Principal(
    user_id="dev",
    username="Development",
    roles=frozenset({RoleType.ADMIN}),
)


def principal_from_headers(request: Request) -> Principal | None:
    """Return the Principal described by the identity headers, or None."""
    user_id = request.headers.get("X-User-Id", "").strip()
    if not user_id:
        return None
    roles = [r for r in request.headers.get("X-User-Roles", "").split(",") if r.strip()]
    return Principal.from_assignment_string(
        user_id,
        request.headers.get("X-User-Name", user_id),
        roles,
        assigned_plants=request.headers.get("X-User-Plants"),
        primary_plant=request.headers.get("X-Primary-Plant"),
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware attaching the caller's Principal to the request.

    When enabled (require_auth=True), requests to non-public paths without
    identity headers are rejected with 401. When disabled, requests without
    headers run as a development administrator.
    """

    def __init__(self, app, require_auth: bool = True):
        super().__init__(app)
        self.require_auth = require_auth

    async def dispatch(self, request: Request, call_next):
        """Process incoming request for authentication."""
        request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))
        request.state.request_id = request_id

        path = request.url.path.rstrip("/") or "/"
        if path in PUBLIC_PATHS:
            return await call_next(request)

        principal = principal_from_headers(request)
        if principal is None and not self.require_auth:
            principal = DEV_PRINCIPAL

        if principal is None:
            logger.warning(f"[{request_id}] Missing identity headers for {path}")
            body = AuthenticationRequiredError("Authentication required").to_dict()
            body["path"] = request.url.path
            return JSONResponse(status_code=401, content=body)

        request.state.principal = principal
        logger.debug(
            f"[{request_id}] Authenticated: user={principal.username} "
            f"roles={sorted(r.role_name for r in principal.roles)}"
        )
        return await call_next(request)
