"""
In-process workflow store.

Read methods carry plant filter policies, so callers only ever see
workflows from the plants they are assigned to.
"""

from __future__ import annotations

from pydantic import BaseModel

from qrmfg_core.domain.auth import Principal
from qrmfg_core.domain.filter_policy import ResultShape
from qrmfg_core.domain.paging import Page, PageRequest
from qrmfg_core.filtering import plant_data_filter


class WorkflowRecord(BaseModel):
    """A material workflow owned by one plant (None for global workflows)."""

    id: int
    material_code: str
    plant_code: str | None = None
    state: str = "JVC_PENDING"


class WorkflowRepository:
    def __init__(self, records: list[WorkflowRecord] | None = None):
        self._records: dict[int, WorkflowRecord] = {}
        for record in records or []:
            self.save(record)

    def save(self, record: WorkflowRecord) -> WorkflowRecord:
        self._records[record.id] = record
        return record

    @plant_data_filter()
    def find_all(self, principal: Principal, state: str | None = None) -> list[WorkflowRecord]:
        return [r for r in self._records.values() if state is None or r.state == state]

    @plant_data_filter(result_shape=ResultShape.PAGE)
    def find_page(self, principal: Principal, pageable: PageRequest) -> Page[WorkflowRecord]:
        ordered = sorted(self._records.values(), key=lambda r: r.id)
        content = ordered[pageable.offset:pageable.offset + pageable.page_size]
        return Page(content=content, pageable=pageable, total_elements=len(ordered))

    @plant_data_filter()
    def find_by_id(self, principal: Principal, workflow_id: int) -> WorkflowRecord | None:
        return self._records.get(workflow_id)


_repository = WorkflowRepository()


def get_workflow_repository() -> WorkflowRepository:
    return _repository
