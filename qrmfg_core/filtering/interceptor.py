"""
Plant-based result filtering.

PlantDataFilter reduces the output of a data-returning operation to the
records the principal's plants entitle them to see. The plant_data_filter
decorator attaches a PlantFilterPolicy to a function and applies the filter
to its return value:

    @plant_data_filter(field_path="location.plant_code")
    def list_workflows(principal: Principal, status: str) -> list[Workflow]:
        ...

Records whose plant identifier resolves to None are global and always kept,
unless the principal has no plant assignments at all.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Collection, Iterable, Mapping
from typing import Any, Callable, TypeVar

from loguru import logger
from pydantic import BaseModel

from qrmfg_core.auth.authorization import AuthorizationLookup, default_authorization_service
from qrmfg_core.auth.exceptions import (
    AuthenticationRequiredError,
    PlantAccessDeniedError,
    RBACError,
)
from qrmfg_core.config import settings
from qrmfg_core.domain.auth import Principal
from qrmfg_core.domain.filter_policy import (
    DEFAULT_FILTER_ERROR_MESSAGE,
    PlantFilterPolicy,
    ResultShape,
)
from qrmfg_core.domain.paging import Page
from qrmfg_core.filtering.extractor import FieldExtractor, default_field_extractor

T = TypeVar("T")

# Iterable, but single records rather than containers of records
_SCALAR_TYPES = (str, bytes, bytearray, Mapping, BaseModel)


def detect_shape(result: Any) -> ResultShape:
    """Classify a result as PAGE, SEQUENCE or SINGLE by runtime type.

    Any iterable other than strings, mappings and pydantic models is a
    SEQUENCE, so generators and iterators are filtered rather than treated
    as one unscoped record.
    """
    if isinstance(result, Page):
        return ResultShape.PAGE
    if isinstance(result, Iterable) and not isinstance(result, _SCALAR_TYPES):
        return ResultShape.SEQUENCE
    return ResultShape.SINGLE


def _rebuild(original: Collection, items: list) -> Collection:
    """Build a collection of the same concrete kind as original."""
    for base in (list, tuple, set, frozenset):
        if isinstance(original, base):
            try:
                return type(original)(items)
            except TypeError:
                return base(items)
    try:
        return type(original)(items)
    except TypeError:
        return items


class PlantDataFilter:
    """Applies a PlantFilterPolicy to operation results.

    Stateless; one instance can be shared across threads and requests.
    """

    def __init__(
        self,
        lookup: AuthorizationLookup | None = None,
        extractor: FieldExtractor | None = None,
    ):
        self.lookup = lookup or default_authorization_service
        self.extractor = extractor or default_field_extractor

    def should_apply_filtering(self, principal: Principal, policy: PlantFilterPolicy) -> bool:
        """Admins are never filtered; others depend on the policy's role restriction."""
        if not settings.PLANT_FILTERING_ENABLED:
            return False
        if self.lookup.is_administrator(principal):
            return False
        if policy.restrict_to_plant_scoped_roles:
            return self.lookup.is_plant_scoped_role(principal)
        return True

    def check_principal(
        self, principal: Principal | None, policy: PlantFilterPolicy, operation: str = "operation"
    ) -> bool:
        """Return True when a principal is present.

        Raises:
            AuthenticationRequiredError: No principal and the policy is required.
        """
        if principal is not None:
            return True
        logger.warning(f"No authenticated user found for plant data filtering on {operation}")
        if policy.required:
            raise AuthenticationRequiredError()
        return False

    def apply_filter(
        self,
        principal: Principal | None,
        policy: PlantFilterPolicy,
        result: Any,
        operation: str = "operation",
    ) -> Any:
        """Reduce result to the records principal may see.

        Args:
            principal: The authenticated principal, or None.
            policy: The filter policy of the protected operation.
            result: What the operation returned.
            operation: Name used in log lines.

        Returns:
            The result unchanged when filtering does not apply, otherwise the
            filtered result in the same shape. None for a single record the
            principal may not see when the policy is optional.

        Raises:
            AuthenticationRequiredError: No principal and policy.required.
            PlantAccessDeniedError: A single record belongs to another plant,
                or filtering failed, and policy.required.
        """
        if not self.check_principal(principal, policy, operation):
            return result

        if not self.should_apply_filtering(principal, policy):
            logger.debug(f"Plant filtering not required for {principal.username} on {operation}")
            return result

        if result is None:
            return None

        try:
            shape = policy.result_shape
            if shape is ResultShape.AUTO:
                shape = detect_shape(result)

            if shape is ResultShape.SEQUENCE:
                if isinstance(result, Iterable) and not isinstance(result, (Collection, Page)):
                    # one-shot iterable; keep the records for the fail-open path
                    result = list(result)
                return self.filter_sequence(principal, policy, result)
            if shape is ResultShape.PAGE:
                return self.filter_page(principal, policy, result)
            return self.filter_single(principal, policy, result)
        except RBACError:
            raise
        except Exception as e:
            logger.exception(f"Error applying plant data filtering for {operation}: {e}")
            if policy.required:
                message = policy.error_message or DEFAULT_FILTER_ERROR_MESSAGE
                raise PlantAccessDeniedError.filtering_failed(message, cause=e) from e
            logger.warning(f"Returning unfiltered result for {operation}; filtering is optional")
            return result

    def _field_path(self, policy: PlantFilterPolicy) -> str:
        return policy.field_path or settings.DEFAULT_PLANT_FIELD

    def _is_visible(self, record: Any, path: str, allowed: set[str]) -> bool:
        plant_code = self.extractor.extract(record, path)
        return plant_code is None or plant_code in allowed

    def filter_single(self, principal: Principal, policy: PlantFilterPolicy, record: T) -> T | None:
        """Return record if visible; otherwise deny or return None."""
        if record is None:
            return None
        allowed = self.lookup.allowed_plant_ids(principal)
        plant_code = self.extractor.extract(record, self._field_path(policy))

        if not allowed:
            logger.debug("User has no assigned plants, denying single entity")
        elif plant_code is None:
            logger.debug("Single entity access granted for entity with null plant code")
            return record
        elif plant_code in allowed:
            logger.debug(f"Single entity access granted for plant: {plant_code}")
            return record
        else:
            logger.debug(f"Single entity access denied for plant: {plant_code}")

        if policy.required:
            raise PlantAccessDeniedError(plant_code, allowed)
        return None

    def filter_sequence(self, principal: Principal, policy: PlantFilterPolicy, records: Iterable) -> Collection:
        """Keep visible records, preserving order and container kind.

        One-shot iterables (generators, map objects) are consumed and the
        visible records returned as a list.
        """
        if not isinstance(records, Iterable) or isinstance(records, _SCALAR_TYPES + (Page,)):
            raise TypeError(f"Expected a collection but got {type(records).__name__}")
        if not isinstance(records, Collection):
            records = list(records)
        if not records:
            return records

        allowed = self.lookup.allowed_plant_ids(principal)
        if not allowed:
            logger.debug("User has no assigned plants, returning empty collection")
            return _rebuild(records, [])

        path = self._field_path(policy)
        kept = [r for r in records if self._is_visible(r, path, allowed)]
        logger.debug(f"Filtered collection from {len(records)} to {len(kept)} items based on plant access")
        return _rebuild(records, kept)

    def filter_page(self, principal: Principal, policy: PlantFilterPolicy, page: Page[T]) -> Page[T]:
        """Filter page content; the total becomes the filtered count."""
        if not isinstance(page, Page):
            raise TypeError(f"Expected a Page but got {type(page).__name__}")
        if page.is_empty:
            return page

        allowed = self.lookup.allowed_plant_ids(principal)
        if not allowed:
            logger.debug("User has no assigned plants, returning empty page")
            return Page.empty(page.pageable)

        path = self._field_path(policy)
        kept = [r for r in page.content if self._is_visible(r, path, allowed)]
        logger.debug(f"Filtered page content from {len(page.content)} to {len(kept)} items based on plant access")
        return Page(content=kept, pageable=page.pageable, total_elements=len(kept))

    def filter_by_plant_access(
        self, records: list[T], principal: Principal, field_path: str | None = None
    ) -> list[T]:
        """Filter a list for a plant user; optional policy, fails open."""
        policy = PlantFilterPolicy(
            required=False,
            result_shape=ResultShape.SEQUENCE,
            field_path=field_path,
        )
        return self.apply_filter(principal, policy, list(records), operation="filter_by_plant_access")

    def wrap(
        self,
        policy: PlantFilterPolicy,
        func: Callable[..., Any],
        principal_arg: str = "principal",
    ) -> Callable[..., Any]:
        """Return func with its results filtered under policy.

        The principal is read from the argument named principal_arg. If func
        has no such parameter, the keyword is consumed by the wrapper.
        """
        sig = inspect.signature(func)
        takes_principal = principal_arg in sig.parameters
        operation = func.__qualname__

        def _principal(args: tuple, kwargs: dict) -> Principal | None:
            if not takes_principal:
                return kwargs.pop(principal_arg, None)
            bound = sig.bind_partial(*args, **kwargs)
            return bound.arguments.get(principal_arg)

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                principal = _principal(args, kwargs)
                if not self.check_principal(principal, policy, operation):
                    return await func(*args, **kwargs)
                result = await func(*args, **kwargs)
                return self.apply_filter(principal, policy, result, operation)

            async_wrapper.plant_filter_policy = policy  # type: ignore[attr-defined]
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            principal = _principal(args, kwargs)
            if not self.check_principal(principal, policy, operation):
                return func(*args, **kwargs)
            result = func(*args, **kwargs)
            return self.apply_filter(principal, policy, result, operation)

        wrapper.plant_filter_policy = policy  # type: ignore[attr-defined]
        return wrapper


default_plant_data_filter = PlantDataFilter()


def plant_data_filter(
    policy: PlantFilterPolicy | None = None,
    *,
    principal_arg: str = "principal",
    data_filter: PlantDataFilter | None = None,
    **policy_fields: Any,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator that filters a function's return value by plant.

    Usage:
        @plant_data_filter(required=False)
        def list_documents(principal: Principal) -> list[Document]:
            ...

        @plant_data_filter(PlantFilterPolicy(result_shape=ResultShape.PAGE))
        async def page_workflows(principal: Principal, page: PageRequest) -> Page[Workflow]:
            ...

    Args:
        policy: A complete policy. Mutually exclusive with policy_fields.
        principal_arg: Name of the argument carrying the Principal.
        data_filter: Filter instance to use. Defaults to the shared one.
        **policy_fields: PlantFilterPolicy fields when no policy is given.

    Returns:
        A decorator producing the filtered function.
    """
    if policy is not None and policy_fields:
        raise TypeError("Pass either a PlantFilterPolicy or policy fields, not both")
    resolved = policy or PlantFilterPolicy(**policy_fields)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        return (data_filter or default_plant_data_filter).wrap(resolved, func, principal_arg)

    return decorator


def with_plant_filter(
    policy: PlantFilterPolicy,
    operation: Callable[..., T],
    data_filter: PlantDataFilter | None = None,
) -> Callable[..., T]:
    """Explicit form of the decorator: filtered(principal, *args, **kwargs)."""
    wrapped = (data_filter or default_plant_data_filter).wrap(policy, operation)
    params = list(inspect.signature(operation).parameters)
    principal_first = bool(params) and params[0] == "principal"

    @functools.wraps(operation)
    def filtered(principal: Principal | None, *args: Any, **kwargs: Any) -> T:
        if principal_first:
            return wrapped(principal, *args, **kwargs)
        return wrapped(*args, principal=principal, **kwargs)

    return filtered
