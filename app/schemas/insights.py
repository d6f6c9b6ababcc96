"""Project and insight schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.accounting.enums import InvoiceType, ProjectHealth, ProjectStatus, RiskLevel


class ProjectCreate(BaseModel):
    project_code: str = Field(..., min_length=1, max_length=50)
    project_name: str = Field(..., min_length=1, max_length=200)
    budget: Decimal = Field(..., ge=0, decimal_places=2)
    status: ProjectStatus = ProjectStatus.PLANNING
    planned_progress: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    actual_progress: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProjectProgressUpdate(BaseModel):
    planned_progress: Optional[Decimal] = Field(default=None, ge=0, le=100)
    actual_progress: Optional[Decimal] = Field(default=None, ge=0, le=100)
    status: Optional[ProjectStatus] = None


class ProjectResponse(BaseModel):
    id: UUID
    project_code: str
    project_name: str
    status: ProjectStatus
    budget: Decimal
    spent: Decimal
    planned_progress: Decimal
    actual_progress: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RiskFactorResponse(BaseModel):
    factor: str
    score: int
    description: str

    class Config:
        from_attributes = True


class RiskResponse(BaseModel):
    """Risk assessment for one project."""
    project_id: Optional[UUID] = None
    project_name: Optional[str] = None
    risk_score: int
    risk_level: RiskLevel
    factors: List[RiskFactorResponse]
    recommendations: List[str] = []

    @classmethod
    def from_result(cls, result) -> "RiskResponse":
        return cls(
            project_id=result.project_id,
            project_name=result.project_name,
            risk_score=result.score,
            risk_level=result.level,
            factors=[RiskFactorResponse.model_validate(f) for f in result.factors],
            recommendations=result.recommendations,
        )


class RiskListResponse(BaseModel):
    risks: List[RiskResponse]


class RiskLogResponse(BaseModel):
    id: int
    project_id: UUID
    risk_score: int
    risk_level: RiskLevel
    factors: List[RiskFactorResponse]
    created_at: datetime

    class Config:
        from_attributes = True


class MonthlyCashFlowResponse(BaseModel):
    month: date
    inflow: Decimal
    outflow: Decimal
    net_flow: Decimal

    class Config:
        from_attributes = True


class ForecastMonthResponse(BaseModel):
    month: date
    projected_inflow: Decimal
    projected_outflow: Decimal
    projected_net_flow: Decimal
    confidence: int

    class Config:
        from_attributes = True


class CashFlowForecastResponse(BaseModel):
    """
    Forecast response. When history is too short, ``sufficient_data`` is
    false, ``message`` explains why and the forecast lists are empty.
    """
    sufficient_data: bool
    message: Optional[str] = None
    historical: List[MonthlyCashFlowResponse] = []
    forecast: List[ForecastMonthResponse] = []
    optimistic: List[ForecastMonthResponse] = []
    pessimistic: List[ForecastMonthResponse] = []
    average_inflow: Optional[Decimal] = None
    average_outflow: Optional[Decimal] = None
    average_net_flow: Optional[Decimal] = None
    inflow_trend_percent: Optional[Decimal] = None
    outflow_trend_percent: Optional[Decimal] = None


# ============================================
# PROJECT HEALTH
# ============================================

class BudgetMetrics(BaseModel):
    total: Decimal
    spent: Decimal
    remaining: Decimal
    usage_percent: Optional[Decimal] = None


class ProgressMetrics(BaseModel):
    planned: Decimal
    actual: Decimal
    deviation: Decimal


class TimelineMetrics(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ProjectStatus


class ProjectMetrics(BaseModel):
    budget: BudgetMetrics
    progress: ProgressMetrics
    timeline: TimelineMetrics


class ProjectHealthFlags(BaseModel):
    is_on_schedule: bool
    is_within_budget: bool
    budget_deviation: Optional[Decimal] = None


class ProjectProgressInsightResponse(BaseModel):
    """Health of one project. ``usage_percent`` is null when spend is unbounded."""
    project_id: UUID
    project_name: str
    health_status: ProjectHealth
    health_score: int
    metrics: ProjectMetrics
    insights: ProjectHealthFlags


# ============================================
# DASHBOARD
# ============================================

class HighRiskProject(BaseModel):
    project_id: UUID
    project_code: str
    project_name: str
    status: ProjectStatus
    budget: Decimal
    spent: Decimal
    usage_percent: Optional[Decimal] = None
    planned_progress: Decimal
    actual_progress: Decimal
    overdue_invoices: int


class BudgetAlert(BaseModel):
    project_id: UUID
    project_code: str
    project_name: str
    budget: Decimal
    spent: Decimal
    usage_percent: Optional[Decimal] = None


class OverdueSummary(BaseModel):
    invoice_type: InvoiceType
    count: int
    total_amount: Decimal


class RevenueMonth(BaseModel):
    month: date
    revenue: Decimal


class DashboardSummary(BaseModel):
    critical_projects: int
    total_overdue: Decimal
    projects_over_budget: int


class DashboardInsightsResponse(BaseModel):
    as_of: date
    high_risk_projects: List[HighRiskProject]
    overdue_payments: List[OverdueSummary]
    budget_alerts: List[BudgetAlert]
    revenue_trend: List[RevenueMonth]
    summary: DashboardSummary
