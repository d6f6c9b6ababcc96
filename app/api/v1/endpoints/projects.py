"""Project API endpoints."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import ledger_http_error
from app.db.dependencies import get_db
from app.domain.accounting.enums import ProjectStatus
from app.domain.accounting.exceptions import LedgerError
from app.domain.projects.project_service import (
    create_project,
    get_project,
    list_projects,
    update_project_progress,
)
from app.schemas.insights import ProjectCreate, ProjectProgressUpdate, ProjectResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project_endpoint(
    project_data: ProjectCreate,
    db: Session = Depends(get_db),
) -> ProjectResponse:
    """Create a project. Spent starts at zero and grows with payable invoices."""
    try:
        project = create_project(db, **project_data.model_dump())
        return ProjectResponse.model_validate(project)
    except LedgerError as e:
        raise ledger_http_error(e)


@router.get("", response_model=List[ProjectResponse])
def list_projects_endpoint(
    status: Optional[ProjectStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
) -> List[ProjectResponse]:
    projects = list_projects(db, statuses=[status] if status else None)
    return [ProjectResponse.model_validate(p) for p in projects]


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project_endpoint(
    project_id: UUID,
    db: Session = Depends(get_db),
) -> ProjectResponse:
    try:
        return ProjectResponse.model_validate(get_project(db, project_id))
    except LedgerError as e:
        raise ledger_http_error(e)


@router.patch("/{project_id}/progress", response_model=ProjectResponse)
def update_project_progress_endpoint(
    project_id: UUID,
    progress_data: ProjectProgressUpdate,
    db: Session = Depends(get_db),
) -> ProjectResponse:
    """Record planned and actual progress or change the project status."""
    try:
        project = update_project_progress(
            db,
            project_id,
            planned_progress=progress_data.planned_progress,
            actual_progress=progress_data.actual_progress,
            status=progress_data.status,
        )
        return ProjectResponse.model_validate(project)
    except LedgerError as e:
        raise ledger_http_error(e)
