"""
Method-level role guard.

require_role rejects calls whose principal lacks the listed roles. Admins
pass by default.
"""

from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, TypeVar

from loguru import logger

from qrmfg_core.auth.exceptions import AuthenticationRequiredError, InsufficientRoleError
from qrmfg_core.domain.auth import Principal, RoleType

T = TypeVar("T")


def check_roles(
    principal: Principal | None,
    roles: tuple[RoleType, ...],
    require_all: bool = False,
    message: str = "",
    allow_admin_bypass: bool = True,
    resource: str = "resource",
) -> None:
    """Raise unless principal satisfies the role requirement."""
    if principal is None:
        logger.warning(f"No authenticated user found for role check on {resource}")
        raise AuthenticationRequiredError("Authentication required to access this resource")

    if allow_admin_bypass and principal.is_admin:
        logger.debug(f"Admin user bypassing role requirements for {resource}")
        return

    if require_all:
        granted = all(role in principal.roles for role in roles)
    else:
        granted = any(role in principal.roles for role in roles)

    if not granted:
        logger.bind(audit=True, user_id=principal.user_id, granted=False).warning(
            f"Access denied for {principal.username} to {resource}. "
            f"Required roles: {[r.role_name for r in roles]}"
        )
        raise InsufficientRoleError(roles, principal.roles, require_all, message or None)

    logger.debug(f"Access granted for {principal.username} to {resource}")


def require_role(
    *roles: RoleType,
    require_all: bool = False,
    message: str = "",
    allow_admin_bypass: bool = True,
    principal_arg: str = "principal",
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator requiring one (or all) of roles.

    Usage:
        @require_role(RoleType.TECH_ROLE, RoleType.CQS_ROLE)
        def approve(principal: Principal, workflow_id: str) -> None:
            ...
    """
    if not roles:
        raise ValueError("require_role needs at least one role")

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        sig = inspect.signature(func)
        resource = func.__qualname__

        def _check(args: tuple, kwargs: dict) -> None:
            bound = sig.bind_partial(*args, **kwargs)
            check_roles(
                bound.arguments.get(principal_arg),
                roles,
                require_all=require_all,
                message=message,
                allow_admin_bypass=allow_admin_bypass,
                resource=resource,
            )

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                _check(args, kwargs)
                return await func(*args, **kwargs)

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            _check(args, kwargs)
            return func(*args, **kwargs)

        return wrapper

    return decorator
