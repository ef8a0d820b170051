"""
Plant identifier extraction from arbitrary records.

Records are resolved by a dotted path such as "location.plant_code". Each
segment is looked up as a mapping key, then an attribute, then an accessor
method (get_plant_code / getPlantCode). Keys and attributes match the
segment as written or in its snake_case or camelCase spelling, so
"plant_code" also finds plantCode. Types that need something else can
register an explicit extractor for a path.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Callable

from loguru import logger

Extractor = Callable[[Any], Any]

_MISSING = object()
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class FieldExtractor:
    """Resolves plant identifiers from records of any type."""

    def __init__(self):
        self._registry: dict[tuple[type, str], Extractor] = {}

    def register(self, record_type: type, path: str, func: Extractor) -> None:
        """Bind an explicit extractor for records of record_type and path.

        Subclasses of record_type use it too unless they register their own.
        """
        self._registry[(record_type, path)] = func

    def unregister(self, record_type: type, path: str) -> None:
        self._registry.pop((record_type, path), None)

    def _registered(self, record: Any, path: str) -> Extractor | None:
        for klass in type(record).__mro__:
            func = self._registry.get((klass, path))
            if func is not None:
                return func
        return None

    def extract(self, record: Any, path: str) -> str | None:
        """Return the plant identifier at path as a string, or None.

        Reflective resolution failures are logged and reported as None, which
        the filter treats as an unscoped record. Errors raised by a
        registered extractor propagate to the caller.
        """
        if record is None:
            return None

        func = self._registered(record, path)
        if func is not None:
            value = func(record)
            return None if value is None else str(value)

        try:
            value = self.resolve(record, path)
        except Exception as e:
            logger.warning(
                f"Failed to extract plant code from field '{path}' "
                f"in entity {type(record).__name__}: {e}"
            )
            return None
        return None if value is None else str(value)

    def resolve(self, record: Any, path: str) -> Any:
        """Walk path left to right; raises on accessor errors."""
        current = record
        for segment in path.split("."):
            current = self._resolve_segment(current, segment)
            if current is None:
                return None
        return current

    @staticmethod
    def _resolve_segment(obj: Any, segment: str) -> Any:
        if isinstance(obj, Mapping):
            for key in _attribute_names(segment):
                if key in obj:
                    return obj[key]
            return None

        for name in _attribute_names(segment):
            value = getattr(obj, name, _MISSING)
            if value is not _MISSING and not callable(value):
                return value

        for name in _accessor_names(segment):
            accessor = getattr(obj, name, None)
            if callable(accessor):
                return accessor()

        logger.debug(f"No field or accessor '{segment}' on {type(obj).__name__}")
        return None


def _to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _to_pascal(name: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in _to_snake(name).split("_") if part)


def _attribute_names(segment: str) -> list[str]:
    """segment as given, then its snake_case and camelCase spellings."""
    pascal = _to_pascal(segment)
    names = [segment, _to_snake(segment), pascal[:1].lower() + pascal[1:]]
    return list(dict.fromkeys(n for n in names if n))


def _accessor_names(segment: str) -> list[str]:
    return [f"get_{_to_snake(segment)}", f"get{_to_pascal(segment)}"]


default_field_extractor = FieldExtractor()
