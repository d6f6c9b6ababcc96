"""Project health and portfolio dashboard insights.

Read-only views over project figures and invoices. Nothing here is persisted.
"""

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.accounting import Invoice
from app.domain.accounting.enums import (
    InvoiceStatus,
    InvoiceType,
    ProjectHealth,
    ProjectStatus,
)
from app.domain.accounting.invoice_service import count_overdue_invoices, overdue_predicates
from app.domain.projects.project_service import get_project, list_projects

logger = structlog.get_logger()

CENT = Decimal("0.01")

# (deviation threshold, points deducted, health), checked worst first
SCHEDULE_HEALTH_BANDS = ((Decimal("-10"), 40, ProjectHealth.CRITICAL), (Decimal("-5"), 20, ProjectHealth.POOR))
BUDGET_HEALTH_BANDS = ((Decimal("15"), 40, ProjectHealth.CRITICAL), (Decimal("10"), 20, ProjectHealth.POOR))
ON_SCHEDULE_TOLERANCE = Decimal("-5")
WITHIN_BUDGET_TOLERANCE = Decimal("10")

HIGH_RISK_STATUSES = (ProjectStatus.ACTIVE, ProjectStatus.ON_HOLD)
HIGH_RISK_BUDGET_USAGE = Decimal("90")
HIGH_RISK_SCHEDULE_GAP = Decimal("10")
HIGH_RISK_LIMIT = 5

BUDGET_ALERT_STATUSES = (ProjectStatus.ACTIVE, ProjectStatus.PLANNING)
BUDGET_ALERT_USAGE = Decimal("85")

REVENUE_TREND_MONTHS = 6

HEALTH_RANK = {ProjectHealth.GOOD: 0, ProjectHealth.POOR: 1, ProjectHealth.CRITICAL: 2}


def budget_usage_percent(budget: Decimal, spent: Decimal) -> Optional[Decimal]:
    """
    Spent as a percent of budget.

    None means unbounded: money spent against a zero budget.
    """
    if not budget:
        return None if spent > 0 else Decimal("0.00")
    return (Decimal(spent) / Decimal(budget) * 100).quantize(CENT)


def _usage_exceeds(usage: Optional[Decimal], threshold: Decimal) -> bool:
    return usage is None or usage > threshold


def _usage_sort_key(usage: Optional[Decimal]) -> Decimal:
    return Decimal("Infinity") if usage is None else usage


def _month_start(day: date, months_back: int = 0) -> date:
    index = day.year * 12 + day.month - 1 - months_back
    return date(index // 12, index % 12 + 1, 1)


# ============================================
# PROJECT HEALTH
# ============================================

def get_project_progress_insights(db: Session, project_id: UUID) -> Dict[str, Any]:
    """
    Health of one project from its progress and budget deviation.

    Progress deviation is actual minus planned progress; budget deviation is
    budget usage percent minus actual progress. Each side deducts 40 points
    (critical) or 20 points (poor) from a score of 100, and the health is the
    worse of the two sides.

    Raises:
        NotFoundError: If the project does not exist
    """
    project = get_project(db, project_id)

    planned = Decimal(project.planned_progress)
    actual = Decimal(project.actual_progress)
    progress_deviation = (actual - planned).quantize(CENT)
    usage = budget_usage_percent(project.budget, project.spent)
    budget_deviation = None if usage is None else (usage - actual).quantize(CENT)

    health = ProjectHealth.GOOD
    score = 100
    for threshold, points, band_health in SCHEDULE_HEALTH_BANDS:
        if progress_deviation < threshold:
            score -= points
            health = band_health
            break
    for threshold, points, band_health in BUDGET_HEALTH_BANDS:
        if budget_deviation is None or budget_deviation > threshold:
            score -= points
            if HEALTH_RANK[band_health] > HEALTH_RANK[health]:
                health = band_health
            break

    logger.debug(
        "Project health computed",
        project_id=str(project_id),
        health=health.value,
        score=score,
    )

    return {
        "project_id": project.id,
        "project_name": project.project_name,
        "health_status": health,
        "health_score": max(0, score),
        "metrics": {
            "budget": {
                "total": project.budget,
                "spent": project.spent,
                "remaining": project.budget - project.spent,
                "usage_percent": usage,
            },
            "progress": {
                "planned": planned,
                "actual": actual,
                "deviation": progress_deviation,
            },
            "timeline": {
                "start_date": project.start_date,
                "end_date": project.end_date,
                "status": project.status,
            },
        },
        "insights": {
            "is_on_schedule": progress_deviation >= ON_SCHEDULE_TOLERANCE,
            "is_within_budget": budget_deviation is not None and budget_deviation <= WITHIN_BUDGET_TOLERANCE,
            "budget_deviation": budget_deviation,
        },
    }


# ============================================
# DASHBOARD
# ============================================

def _high_risk_projects(db: Session, as_of: date) -> List[Dict[str, Any]]:
    flagged = []
    for project in list_projects(db, statuses=HIGH_RISK_STATUSES):
        usage = budget_usage_percent(project.budget, project.spent)
        behind = project.actual_progress < project.planned_progress - HIGH_RISK_SCHEDULE_GAP
        if _usage_exceeds(usage, HIGH_RISK_BUDGET_USAGE) or behind:
            flagged.append((project, usage))

    flagged.sort(key=lambda item: _usage_sort_key(item[1]), reverse=True)
    return [
        {
            "project_id": project.id,
            "project_code": project.project_code,
            "project_name": project.project_name,
            "status": project.status,
            "budget": project.budget,
            "spent": project.spent,
            "usage_percent": usage,
            "planned_progress": project.planned_progress,
            "actual_progress": project.actual_progress,
            "overdue_invoices": count_overdue_invoices(db, project.id, as_of),
        }
        for project, usage in flagged[:HIGH_RISK_LIMIT]
    ]


def _budget_alerts(db: Session) -> List[Dict[str, Any]]:
    alerts = []
    for project in list_projects(db, statuses=BUDGET_ALERT_STATUSES):
        usage = budget_usage_percent(project.budget, project.spent)
        if _usage_exceeds(usage, BUDGET_ALERT_USAGE):
            alerts.append({
                "project_id": project.id,
                "project_code": project.project_code,
                "project_name": project.project_name,
                "budget": project.budget,
                "spent": project.spent,
                "usage_percent": usage,
            })
    alerts.sort(key=lambda alert: _usage_sort_key(alert["usage_percent"]), reverse=True)
    return alerts


def _overdue_by_type(db: Session, as_of: date) -> List[Dict[str, Any]]:
    rows = db.execute(
        select(
            Invoice.invoice_type,
            func.count(Invoice.id).label("invoice_count"),
            func.sum(Invoice.balance).label("total_amount"),
        )
        .where(*overdue_predicates(as_of))
        .group_by(Invoice.invoice_type)
        .order_by(Invoice.invoice_type)
    ).all()
    return [
        {
            "invoice_type": row.invoice_type,
            "count": row.invoice_count,
            "total_amount": Decimal(str(row.total_amount or 0)).quantize(CENT),
        }
        for row in rows
    ]


def _revenue_trend(db: Session, as_of: date) -> List[Dict[str, Any]]:
    since = _month_start(as_of, REVENUE_TREND_MONTHS - 1)
    rows = db.execute(
        select(Invoice.invoice_date, Invoice.total_amount)
        .where(
            Invoice.invoice_type == InvoiceType.RECEIVABLE,
            Invoice.status == InvoiceStatus.PAID,
            Invoice.invoice_date >= since,
            Invoice.invoice_date <= as_of,
        )
        .order_by(Invoice.invoice_date.desc())
    ).all()

    months: "OrderedDict[date, Decimal]" = OrderedDict()
    for invoice_date, total_amount in rows:
        month = _month_start(invoice_date)
        months[month] = months.get(month, Decimal("0.00")) + Decimal(total_amount)
    return [{"month": month, "revenue": revenue} for month, revenue in months.items()]


def get_dashboard_insights(db: Session, as_of: date | None = None) -> Dict[str, Any]:
    """
    Portfolio dashboard.

    - High-risk projects: active or on hold, with budget usage above 90% or
      actual progress more than 10 points behind plan; top five by usage.
    - Overdue payments: count and outstanding balance per invoice type.
    - Budget alerts: active or planning projects above 85% budget usage.
    - Revenue trend: paid receivable invoices per month over six months.
    """
    as_of = as_of or date.today()

    high_risk = _high_risk_projects(db, as_of)
    overdue = _overdue_by_type(db, as_of)
    alerts = _budget_alerts(db)

    logger.info(
        "Dashboard insights computed",
        high_risk_projects=len(high_risk),
        budget_alerts=len(alerts),
    )

    return {
        "as_of": as_of,
        "high_risk_projects": high_risk,
        "overdue_payments": overdue,
        "budget_alerts": alerts,
        "revenue_trend": _revenue_trend(db, as_of),
        "summary": {
            "critical_projects": len(high_risk),
            "total_overdue": sum((o["total_amount"] for o in overdue), Decimal("0.00")),
            "projects_over_budget": len(alerts),
        },
    }
