"""Unit tests for the plant_data_filter decorator and with_plant_filter."""

import asyncio

import pytest

from qrmfg_core.auth.exceptions import AuthenticationRequiredError, PlantAccessDeniedError
from qrmfg_core.domain.filter_policy import PlantFilterPolicy, ResultShape
from qrmfg_core.domain.paging import Page, PageRequest
from qrmfg_core.filtering.interceptor import (
    PlantDataFilter,
    plant_data_filter,
    with_plant_filter,
)
from tests.qrmfg_core.filtering.fakes import FakeLookup, Workflow, workflows


class WorkflowRepository:
    """In-memory repository counting fetches."""

    def __init__(self, records):
        self.records = records
        self.calls = 0

    @plant_data_filter()
    def find_all(self, principal):
        self.calls += 1
        return list(self.records)

    @plant_data_filter(required=False)
    def find_optional(self, principal):
        self.calls += 1
        return list(self.records)

    @plant_data_filter(result_shape=ResultShape.PAGE)
    def find_page(self, principal, pageable: PageRequest):
        self.calls += 1
        start = pageable.offset
        content = self.records[start:start + pageable.page_size]
        return Page(content=content, pageable=pageable, total_elements=len(self.records))

    @plant_data_filter()
    def find_by_id(self, principal, workflow_id):
        self.calls += 1
        return next((r for r in self.records if r.id == workflow_id), None)

    @plant_data_filter()
    def stream_all(self, principal):
        self.calls += 1
        return (r for r in self.records)

    @plant_data_filter()
    def find_without_principal_param(self):
        self.calls += 1
        return list(self.records)


@pytest.fixture
def repo():
    return WorkflowRepository(workflows("P1", None, "P3", "P2"))


class TestPlantDataFilterDecorator:
    """Tests for decorated repository methods."""

    def test_filters_list(self, repo, plant_user):
        result = repo.find_all(plant_user)

        assert [w.plant_code for w in result] == ["P1", None, "P2"]
        assert repo.calls == 1

    def test_generator_result_is_filtered(self, repo, plant_user):
        result = repo.stream_all(plant_user)

        assert [w.plant_code for w in result] == ["P1", None, "P2"]
        assert repo.calls == 1

    def test_principal_by_keyword(self, repo, plant_user):
        result = repo.find_all(principal=plant_user)

        assert len(result) == 3

    def test_admin_bypass_invokes_once(self, repo, admin):
        assert len(repo.find_all(admin)) == 4
        assert repo.calls == 1

    def test_missing_principal_raises_before_fetch(self, repo):
        with pytest.raises(AuthenticationRequiredError):
            repo.find_all(None)

        assert repo.calls == 0

    def test_missing_principal_optional_returns_unfiltered(self, repo):
        assert len(repo.find_optional(None)) == 4
        assert repo.calls == 1

    def test_page(self, repo, plant_user):
        page = repo.find_page(plant_user, PageRequest(page_number=0, page_size=3))

        assert [w.plant_code for w in page.content] == ["P1", None]
        assert page.total_elements == 2
        assert page.pageable.page_size == 3

    def test_single_denied(self, repo, plant_user):
        with pytest.raises(PlantAccessDeniedError) as exc_info:
            repo.find_by_id(plant_user, 2)

        assert exc_info.value.requested_plant_code == "P3"

    def test_single_not_found(self, repo, plant_user):
        assert repo.find_by_id(plant_user, 99) is None

    def test_principal_consumed_when_not_a_parameter(self, repo, plant_user):
        result = repo.find_without_principal_param(principal=plant_user)

        assert len(result) == 3

    def test_policy_is_exposed(self):
        policy = WorkflowRepository.find_optional.plant_filter_policy

        assert policy.required is False

    def test_wraps_metadata(self):
        assert WorkflowRepository.find_all.__name__ == "find_all"

    def test_wrapped_exceptions_are_not_swallowed(self, plant_user):
        @plant_data_filter(required=False)
        def broken(principal):
            raise ValueError("database down")

        with pytest.raises(ValueError, match="database down"):
            broken(plant_user)

    def test_policy_and_fields_are_exclusive(self):
        with pytest.raises(TypeError):
            plant_data_filter(PlantFilterPolicy(), required=False)

    def test_custom_filter_instance(self, plant_user):
        data_filter = PlantDataFilter(lookup=FakeLookup(plants={"P3"}))

        @plant_data_filter(data_filter=data_filter)
        def list_all(principal):
            return workflows("P1", "P3")

        assert [w.plant_code for w in list_all(plant_user)] == ["P3"]

    def test_custom_principal_arg(self, plant_user):
        @plant_data_filter(principal_arg="user")
        def list_all(user):
            return workflows("P1", "P9")

        assert [w.plant_code for w in list_all(plant_user)] == ["P1"]


class TestAsyncDecorator:
    """Tests for coroutine functions."""

    def test_async_filters(self, plant_user):
        @plant_data_filter()
        async def list_all(principal):
            return workflows("P2", "P5")

        result = asyncio.run(list_all(plant_user))

        assert [w.plant_code for w in result] == ["P2"]

    def test_async_missing_principal(self):
        @plant_data_filter()
        async def list_all(principal):
            return workflows("P2")

        with pytest.raises(AuthenticationRequiredError):
            asyncio.run(list_all(None))


class TestWithPlantFilter:
    """Tests for the explicit wrapper form."""

    def test_operation_without_principal(self, plant_user):
        def fetch(status):
            return [Workflow(1, "P1"), Workflow(2, "P4")]

        filtered = with_plant_filter(PlantFilterPolicy(), fetch)

        assert [w.id for w in filtered(plant_user, "OPEN")] == [1]

    def test_operation_taking_principal_first(self, plant_user):
        def fetch(principal, status):
            assert principal is plant_user
            return [Workflow(1, "P9")]

        filtered = with_plant_filter(PlantFilterPolicy(), fetch)

        assert filtered(plant_user, "OPEN") == []
