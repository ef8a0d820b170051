"""Shared fixtures for qrmfg tests."""

import pytest

from qrmfg_core.config import settings
from qrmfg_core.domain.auth import Principal, RoleType


@pytest.fixture
def admin():
    return Principal(
        user_id="u-admin",
        username="admin",
        roles=frozenset({RoleType.ADMIN}),
    )


@pytest.fixture
def plant_user():
    """Plant user assigned to P1 and P2."""
    return Principal(
        user_id="u-plant",
        username="plant.user",
        roles=frozenset({RoleType.PLANT_ROLE}),
        assigned_plants=("P1", "P2"),
    )


@pytest.fixture
def unassigned_plant_user():
    return Principal(
        user_id="u-none",
        username="no.plants",
        roles=frozenset({RoleType.PLANT_ROLE}),
    )


@pytest.fixture
def cqs_user():
    """Non-plant-scoped role with a single plant on record."""
    return Principal(
        user_id="u-cqs",
        username="cqs.user",
        roles=frozenset({RoleType.CQS_ROLE}),
        assigned_plants=("P1",),
    )


@pytest.fixture(autouse=True)
def _plant_filtering_settings(monkeypatch):
    """Pin filter settings so a local .env cannot change test outcomes."""
    monkeypatch.setattr(settings, "PLANT_FILTERING_ENABLED", True)
    monkeypatch.setattr(settings, "DEFAULT_PLANT_FIELD", "plant_code")
