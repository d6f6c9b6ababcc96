"""Project risk scoring.

Additive point model over a project snapshot. Every factor is evaluated on
its own; the total is clamped to 0..100 and mapped to a level.
"""

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

import structlog

from app.domain.accounting.enums import ProjectStatus, RiskLevel

logger = structlog.get_logger()

MAX_SCORE = 100

# (threshold, points), checked highest first; strictly greater than
BUDGET_OVERRUN_BANDS: Tuple[Tuple[float, int], ...] = ((30, 40), (20, 30), (10, 15))
SCHEDULE_DELAY_BANDS: Tuple[Tuple[float, int], ...] = ((20, 30), (10, 20), (5, 10))
OVERDUE_INVOICE_BANDS: Tuple[Tuple[int, int], ...] = ((5, 20), (2, 15), (0, 5))
ON_HOLD_POINTS = 10

# (minimum score, level), checked highest first
LEVEL_THRESHOLDS: Tuple[Tuple[int, RiskLevel], ...] = (
    (70, RiskLevel.CRITICAL),
    (50, RiskLevel.HIGH),
    (30, RiskLevel.MEDIUM),
)

ON_TRACK_RECOMMENDATIONS = [
    "Project is on track",
    "Continue monitoring key metrics",
]


@dataclass(frozen=True)
class ProjectSnapshot:
    """Point-in-time view of the project figures the scorer reads."""
    budget: Decimal
    spent: Decimal
    planned_progress: Decimal
    actual_progress: Decimal
    status: ProjectStatus
    overdue_invoices: int = 0
    project_id: Optional[UUID] = None
    project_name: Optional[str] = None

    @property
    def budget_usage_percent(self) -> float:
        if not self.budget:
            # Any spend against a zero budget is an unbounded overrun
            return float("inf") if self.spent > 0 else 0.0
        return float(self.spent) / float(self.budget) * 100


@dataclass(frozen=True)
class RiskFactor:
    """One triggered risk factor."""
    factor: str
    score: int
    description: str


@dataclass
class RiskResult:
    """Result of scoring one project."""
    score: int
    level: RiskLevel
    factors: List[RiskFactor] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    project_id: Optional[UUID] = None
    project_name: Optional[str] = None

    def factors_as_dicts(self) -> List[Dict[str, Any]]:
        """Factors in the JSON shape stored in the risk log."""
        return [asdict(factor) for factor in self.factors]


def _band_points(value: float, bands: Iterable[Tuple[float, int]]) -> Tuple[int, int]:
    """Return (band index, points) for the first band ``value`` exceeds, or (-1, 0)."""
    for index, (threshold, points) in enumerate(bands):
        if value > threshold:
            return index, points
    return -1, 0


def risk_level_for(score: int) -> RiskLevel:
    for minimum, level in LEVEL_THRESHOLDS:
        if score >= minimum:
            return level
    return RiskLevel.LOW


def score_project_risk(project: ProjectSnapshot) -> RiskResult:
    """
    Score a project's risk.

    Factors:
        budget overrun   spend% - progress% > 30 / 20 / 10 -> 40 / 30 / 15
        schedule delay   planned% - actual% > 20 / 10 / 5  -> 30 / 20 / 10
        overdue invoices count > 5 / 2 / 0                  -> 20 / 15 / 5
        on hold          status is on hold                  -> 10
    """
    factors: List[RiskFactor] = []
    recommendations: List[str] = []

    # Factor 1: budget overrun
    budget_usage = project.budget_usage_percent
    progress = float(project.actual_progress)
    band, points = _band_points(budget_usage - progress, BUDGET_OVERRUN_BANDS)
    if band == 0:
        factors.append(RiskFactor(
            "Critical Budget Overrun",
            points,
            f"Spent {budget_usage:.1f}% of budget with only {progress:g}% progress",
        ))
        recommendations.append("Immediate budget review required")
        recommendations.append("Consider scope reduction or additional funding")
    elif band == 1:
        factors.append(RiskFactor(
            "High Budget Usage",
            points,
            f"Budget usage ({budget_usage:.1f}%) exceeds progress ({progress:g}%)",
        ))
        recommendations.append("Monitor spending closely")
    elif band == 2:
        factors.append(RiskFactor(
            "Moderate Budget Concern",
            points,
            f"Budget usage ({budget_usage:.1f}%) slightly ahead of progress ({progress:g}%)",
        ))

    # Factor 2: schedule delay
    deviation = float(project.planned_progress) - progress
    band, points = _band_points(deviation, SCHEDULE_DELAY_BANDS)
    if band == 0:
        factors.append(RiskFactor(
            "Severe Schedule Delay",
            points,
            f"Project is {deviation:.1f}% behind schedule",
        ))
        recommendations.append("Increase resources or adjust timeline")
    elif band == 1:
        factors.append(RiskFactor(
            "Schedule Delay",
            points,
            f"Behind schedule by {deviation:.1f}%",
        ))
        recommendations.append("Review project timeline and milestones")
    elif band == 2:
        factors.append(RiskFactor(
            "Minor Schedule Concern",
            points,
            f"Slightly behind schedule ({deviation:.1f}%)",
        ))

    # Factor 3: overdue invoices
    overdue = project.overdue_invoices
    band, points = _band_points(overdue, OVERDUE_INVOICE_BANDS)
    if band == 0:
        factors.append(RiskFactor(
            "Multiple Overdue Invoices", points, f"{overdue} overdue invoices",
        ))
        recommendations.append("Address payment collection urgently")
    elif band == 1:
        factors.append(RiskFactor(
            "Overdue Invoices", points, f"{overdue} overdue invoices",
        ))
        recommendations.append("Follow up on outstanding payments")
    elif band == 2:
        factors.append(RiskFactor(
            "Some Overdue Invoices", points, f"{overdue} overdue invoice(s)",
        ))

    # Factor 4: project status
    if project.status == ProjectStatus.ON_HOLD:
        factors.append(RiskFactor(
            "Project On Hold", ON_HOLD_POINTS, "Project is currently on hold",
        ))
        recommendations.append("Resume project or update status")

    score = max(0, min(MAX_SCORE, sum(factor.score for factor in factors)))

    if not recommendations:
        recommendations = list(ON_TRACK_RECOMMENDATIONS)

    return RiskResult(
        score=score,
        level=risk_level_for(score),
        factors=factors,
        recommendations=recommendations,
        project_id=project.project_id,
        project_name=project.project_name,
    )


def score_projects(projects: Iterable[ProjectSnapshot]) -> List[RiskResult]:
    """Score a batch of projects."""
    results = [score_project_risk(project) for project in projects]
    logger.debug("Scored project batch", count=len(results))
    return results
