"""Project records consumed by the analytics layer."""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.project import Project
from app.domain.accounting.enums import ProjectStatus
from app.domain.accounting.exceptions import DuplicateCodeError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def create_project(
    db: Session,
    project_code: str,
    project_name: str,
    budget: Decimal,
    status: ProjectStatus = ProjectStatus.PLANNING,
    planned_progress: Decimal = Decimal("0"),
    actual_progress: Decimal = Decimal("0"),
    start_date: date | None = None,
    end_date: date | None = None,
) -> Project:
    """Create a project with nothing spent yet."""
    if Decimal(budget) < 0:
        raise ValidationError("Project budget cannot be negative")
    _validate_progress(planned_progress, actual_progress)
    if db.scalar(select(Project.id).where(Project.project_code == project_code)) is not None:
        raise DuplicateCodeError(f"Project code {project_code} already exists")

    project = Project(
        project_code=project_code,
        project_name=project_name,
        budget=Decimal(budget),
        spent=Decimal("0.00"),
        status=status,
        planned_progress=Decimal(planned_progress),
        actual_progress=Decimal(actual_progress),
        start_date=start_date,
        end_date=end_date,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info(f"Created project {project.project_code} id={project.id}")
    return project


def get_project(db: Session, project_id: UUID) -> Project:
    project = db.get(Project, project_id)
    if not project:
        raise NotFoundError(f"Project {project_id} not found")
    return project


def list_projects(db: Session, statuses: Sequence[ProjectStatus] | None = None) -> List[Project]:
    """List projects, newest first, optionally restricted to ``statuses``."""
    query = select(Project).order_by(Project.created_at.desc())
    if statuses:
        query = query.where(Project.status.in_(list(statuses)))
    return list(db.scalars(query))


def update_project_progress(
    db: Session,
    project_id: UUID,
    planned_progress: Decimal | None = None,
    actual_progress: Decimal | None = None,
    status: ProjectStatus | None = None,
) -> Project:
    """Record schedule progress and status. ``spent`` is not editable here."""
    project = get_project(db, project_id)
    _validate_progress(
        planned_progress if planned_progress is not None else project.planned_progress,
        actual_progress if actual_progress is not None else project.actual_progress,
    )
    if planned_progress is not None:
        project.planned_progress = Decimal(planned_progress)
    if actual_progress is not None:
        project.actual_progress = Decimal(actual_progress)
    if status is not None:
        project.status = status
    db.commit()
    db.refresh(project)
    return project


def _validate_progress(*values: Decimal) -> None:
    for value in values:
        if not Decimal("0") <= Decimal(value) <= Decimal("100"):
            raise ValidationError(f"Progress must be between 0 and 100, got {value}")
