"""
Auth-specific exceptions.

Every access-control failure is an RBACError. The HTTP layer renders them
as 401 (authentication missing) or 403 (everything else).
"""

from __future__ import annotations

from typing import Any, Iterable

from qrmfg_core.domain.auth import RoleType
from qrmfg_core.runtime.errors import ErrorCode, ServiceError


class RBACError(ServiceError):
    """Base role-based access control error, rendered as 403."""

    status_code = 403

    def __init__(
        self,
        code: str,
        message: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            code=code,
            message_safe=message,
            message_debug=message_debug,
            cause=cause,
        )

    def has_error_code(self, code: str) -> bool:
        return self.code == code


class PlantAccessDeniedError(RBACError):
    """Raised when data belongs to a plant the principal is not assigned to.

    Also raised, with filtering_failure=True, when a required plant filter
    could not be applied at all.
    """

    def __init__(
        self,
        requested_plant_code: str | None = None,
        user_assigned_plants: Iterable[str] | None = None,
        message: str | None = None,
        filtering_failure: bool = False,
        cause: Exception | None = None,
        code: str | None = None,
    ):
        self.requested_plant_code = requested_plant_code
        self.user_assigned_plants = (
            sorted(user_assigned_plants) if user_assigned_plants is not None else None
        )
        self.filtering_failure = filtering_failure
        if message is None:
            message = self._build_message(requested_plant_code, self.user_assigned_plants)
        if code is None:
            code = (
                ErrorCode.PLANT_FILTERING_FAILED
                if filtering_failure
                else ErrorCode.PLANT_ACCESS_DENIED
            )
        super().__init__(
            code=code,
            message=message,
            message_debug=str(cause) if cause else None,
            cause=cause,
        )

    @classmethod
    def filtering_failed(
        cls, message: str, cause: Exception | None = None
    ) -> PlantAccessDeniedError:
        """Denial raised when the filter itself broke."""
        return cls(message=message, filtering_failure=True, cause=cause)

    @staticmethod
    def _build_message(plant_code: str | None, assigned: list[str] | None) -> str:
        if plant_code is None:
            message = "Access denied to plant data"
        else:
            message = f"Access denied to plant: {plant_code}"
        if assigned:
            return f"{message}. You are assigned to: [{', '.join(assigned)}]"
        return f"{message}. You have no plant assignments."

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.requested_plant_code is not None:
            data["requested_plant_code"] = self.requested_plant_code
        if self.user_assigned_plants is not None:
            data["assigned_plants"] = self.user_assigned_plants
        return data


class AuthenticationRequiredError(PlantAccessDeniedError):
    """Raised when a protected operation runs without a principal."""

    status_code = 401

    def __init__(self, message: str = "Authentication required for plant data access"):
        super().__init__(message=message, code=ErrorCode.AUTHENTICATION_REQUIRED)


class InsufficientRoleError(RBACError):
    """Raised when the principal lacks the roles an operation requires."""

    def __init__(
        self,
        required_roles: Iterable[RoleType],
        user_roles: Iterable[RoleType] = (),
        require_all: bool = False,
        message: str | None = None,
    ):
        self.required_roles = list(required_roles)
        self.user_roles = sorted(user_roles, key=lambda r: r.privilege_level, reverse=True)
        self.require_all = require_all
        super().__init__(
            code=ErrorCode.INSUFFICIENT_ROLE,
            message=message or self._build_message(self.required_roles, require_all),
        )

    @staticmethod
    def _build_message(required: list[RoleType], require_all: bool) -> str:
        if len(required) == 1:
            return f"Access denied. Required role: {required[0].role_name}"
        conjunction = "all of" if require_all else "one of"
        names = ", ".join(r.role_name for r in required)
        return f"Access denied. Required {conjunction}: [{names}]"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["required_roles"] = [r.role_name for r in self.required_roles]
        data["user_roles"] = [r.role_name for r in self.user_roles]
        return data
