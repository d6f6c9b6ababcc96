"""Project risk assessment and the append-only risk log."""

from datetime import date
from typing import List
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.project import Project, RiskLog
from app.domain.accounting.enums import ProjectStatus
from app.domain.accounting.invoice_service import count_overdue_invoices
from app.domain.projects.project_service import get_project, list_projects
from app.services.risk_scorer import (
    ProjectSnapshot,
    RiskResult,
    score_project_risk,
    score_projects,
)

logger = structlog.get_logger()

OPEN_STATUSES = (ProjectStatus.PLANNING, ProjectStatus.ACTIVE, ProjectStatus.ON_HOLD)


def build_snapshot(db: Session, project: Project, as_of: date | None = None) -> ProjectSnapshot:
    """Read the figures the scorer needs, counting overdue invoices as of ``as_of``."""
    return ProjectSnapshot(
        project_id=project.id,
        project_name=project.project_name,
        budget=project.budget,
        spent=project.spent,
        planned_progress=project.planned_progress,
        actual_progress=project.actual_progress,
        status=project.status,
        overdue_invoices=count_overdue_invoices(db, project.id, as_of),
    )


def assess_project_risk(
    db: Session,
    project_id: UUID,
    as_of: date | None = None,
    log_result: bool | None = None,
) -> RiskResult:
    """
    Score one project and append the result to the risk log.

    Logging defaults to the ``risk_log_enabled`` setting.
    """
    project = get_project(db, project_id)
    result = score_project_risk(build_snapshot(db, project, as_of))

    if log_result is None:
        log_result = get_settings().risk_log_enabled
    if log_result:
        db.add(RiskLog(
            project_id=project.id,
            risk_score=result.score,
            risk_level=result.level,
            factors=result.factors_as_dicts(),
        ))
        db.commit()

    logger.info(
        "Project risk assessed",
        project_id=str(project_id),
        risk_score=result.score,
        risk_level=result.level.value,
        factors=len(result.factors),
    )
    return result


def assess_open_projects(db: Session, as_of: date | None = None) -> List[RiskResult]:
    """Score every planning, active or on-hold project, highest risk first. Nothing is logged."""
    projects = list_projects(db, statuses=OPEN_STATUSES)
    results = score_projects(build_snapshot(db, project, as_of) for project in projects)
    return sorted(results, key=lambda r: r.score, reverse=True)


def list_risk_logs(db: Session, project_id: UUID, limit: int = 50) -> List[RiskLog]:
    """Risk log entries for a project, newest first."""
    get_project(db, project_id)
    return list(db.scalars(
        select(RiskLog)
        .where(RiskLog.project_id == project_id)
        .order_by(RiskLog.created_at.desc(), RiskLog.id.desc())
        .limit(limit)
    ))
