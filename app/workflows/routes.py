"""
Workflow routes: plant-filtered reads.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from app.workflows.repository import (
    WorkflowRecord,
    WorkflowRepository,
    get_workflow_repository,
)
from qrmfg_core.auth.dependencies import get_principal
from qrmfg_core.domain.auth import Principal
from qrmfg_core.domain.paging import PageRequest

router = APIRouter(prefix="/workflows", tags=["workflows"])


class WorkflowPageResponse(BaseModel):
    content: list[WorkflowRecord]
    page_number: int
    page_size: int
    total_elements: int
    total_pages: int


@router.get("", response_model=list[WorkflowRecord])
def list_workflows(
    state: str | None = None,
    principal: Principal = Depends(get_principal),
    repository: WorkflowRepository = Depends(get_workflow_repository),
):
    """Workflows of the caller's plants plus global ones."""
    return repository.find_all(principal, state=state)


@router.get("/page", response_model=WorkflowPageResponse)
def page_workflows(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=200),
    principal: Principal = Depends(get_principal),
    repository: WorkflowRepository = Depends(get_workflow_repository),
):
    result = repository.find_page(principal, PageRequest(page_number=page, page_size=size))
    return WorkflowPageResponse(
        content=result.content,
        page_number=result.pageable.page_number,
        page_size=result.pageable.page_size,
        total_elements=result.total_elements,
        total_pages=result.total_pages,
    )


@router.get("/{workflow_id}", response_model=WorkflowRecord)
def get_workflow(
    workflow_id: int,
    principal: Principal = Depends(get_principal),
    repository: WorkflowRepository = Depends(get_workflow_repository),
):
    """One workflow; 403 when it belongs to another plant."""
    record = repository.find_by_id(principal, workflow_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return record
