"""
Record types and fake collaborators for filtering tests.
"""

from __future__ import annotations

from dataclasses import dataclass

from qrmfg_core.domain.auth import Principal


@dataclass
class Workflow:
    id: int
    plant_code: str | None


@dataclass
class CamelCaseWorkflow:
    """Record keeping the stored column spelling."""

    id: int
    plantCode: str | None  # noqa: N815


@dataclass
class Location:
    plant_code: str | None


@dataclass
class Document:
    id: int
    location: Location | None


class BaseEntity:
    def __init__(self, plant_code):
        self.plant_code = plant_code


class PlantQuestionnaire(BaseEntity):
    """Inherits its plant field."""


class JavaStyleLocation:
    def __init__(self, code):
        self._code = code

    def getPlantCode(self):
        return self._code


class JavaStyleRecord:
    """Exposes data only through getX accessors."""

    def __init__(self, location):
        self._location = location

    def getLocation(self):
        return self._location


class ExplodingRecord:
    @property
    def plant_code(self):
        raise RuntimeError("lazy load failed")


class FailingExtractor:
    """Extractor that breaks on every record."""

    def extract(self, record, path):
        raise RuntimeError("extractor exploded")


class FakeLookup:
    """AuthorizationLookup with fixed answers, recording calls."""

    def __init__(self, admin: bool = False, plant_scoped: bool = True, plants=()):
        self.admin = admin
        self.plant_scoped = plant_scoped
        self.plants = set(plants)
        self.calls: list[str] = []

    def is_administrator(self, principal: Principal) -> bool:
        self.calls.append("is_administrator")
        return self.admin

    def is_plant_scoped_role(self, principal: Principal) -> bool:
        self.calls.append("is_plant_scoped_role")
        return self.plant_scoped

    def allowed_plant_ids(self, principal: Principal) -> set[str]:
        self.calls.append("allowed_plant_ids")
        return set(self.plants)


def workflows(*codes):
    return [Workflow(id=i, plant_code=code) for i, code in enumerate(codes)]
