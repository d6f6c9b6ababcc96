"""Project risk, health, dashboard and cash flow forecast endpoints."""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.dependencies import ledger_http_error
from app.core.config import get_settings
from app.db.dependencies import get_db
from app.domain.accounting.exceptions import LedgerError
from app.domain.projects.insight_service import (
    get_dashboard_insights,
    get_project_progress_insights,
)
from app.domain.projects.risk_service import (
    assess_open_projects,
    assess_project_risk,
    list_risk_logs,
)
from app.services.cash_flow_forecaster import (
    ForecastMonth,
    InsufficientData,
    forecast_cash_flow,
    forecast_scenarios,
)
from app.services.reporting_service import get_monthly_cash_flow
from app.schemas.insights import (
    CashFlowForecastResponse,
    DashboardInsightsResponse,
    ForecastMonthResponse,
    MonthlyCashFlowResponse,
    ProjectProgressInsightResponse,
    RiskListResponse,
    RiskLogResponse,
    RiskResponse,
)

logger = structlog.get_logger()

router = APIRouter()

CENT = Decimal("0.01")


@router.post("/projects/{project_id}/risk", response_model=RiskResponse)
def assess_project_risk_endpoint(
    project_id: UUID,
    as_of: Optional[date] = Query(None, description="Date overdue invoices are judged against"),
    db: Session = Depends(get_db),
) -> RiskResponse:
    """
    Score a project's risk and append the result to its risk log.

    Factors: budget overrun, schedule delay, overdue invoices and on-hold
    status. Score 0-100; level low, medium, high or critical.
    """
    try:
        return RiskResponse.from_result(assess_project_risk(db, project_id, as_of=as_of))
    except LedgerError as e:
        raise ledger_http_error(e)
    except Exception as e:
        logger.error("Risk assessment failed", project_id=str(project_id), error=str(e))
        raise HTTPException(status_code=500, detail=f"Error assessing project risk: {str(e)}")


@router.get("/projects/{project_id}/risk-logs", response_model=List[RiskLogResponse])
def list_risk_logs_endpoint(
    project_id: UUID,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> List[RiskLogResponse]:
    """Past risk assessments, newest first."""
    try:
        return [RiskLogResponse.model_validate(log) for log in list_risk_logs(db, project_id, limit)]
    except LedgerError as e:
        raise ledger_http_error(e)


@router.get("/risks", response_model=RiskListResponse)
def list_project_risks_endpoint(
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
) -> RiskListResponse:
    """Current risk of every open project, highest score first."""
    results = assess_open_projects(db, as_of=as_of)
    return RiskListResponse(risks=[RiskResponse.from_result(r) for r in results])


@router.get("/projects/{project_id}/progress", response_model=ProjectProgressInsightResponse)
def project_progress_insights_endpoint(
    project_id: UUID,
    db: Session = Depends(get_db),
) -> ProjectProgressInsightResponse:
    """
    Project health from progress and budget deviation.

    Health is good, poor or critical with a 0-100 score, plus on-schedule
    and within-budget flags.
    """
    try:
        return ProjectProgressInsightResponse(**get_project_progress_insights(db, project_id))
    except LedgerError as e:
        raise ledger_http_error(e)
    except Exception as e:
        logger.error("Project health failed", project_id=str(project_id), error=str(e))
        raise HTTPException(status_code=500, detail=f"Error computing project insights: {str(e)}")


@router.get("/dashboard", response_model=DashboardInsightsResponse)
def dashboard_insights_endpoint(
    as_of: Optional[date] = Query(None, description="Date overdue invoices are judged against"),
    db: Session = Depends(get_db),
) -> DashboardInsightsResponse:
    """High-risk projects, overdue totals by invoice type, budget alerts and revenue trend."""
    try:
        return DashboardInsightsResponse(**get_dashboard_insights(db, as_of=as_of))
    except Exception as e:
        logger.error("Dashboard insights failed", error=str(e))
        raise HTTPException(status_code=500, detail=f"Error computing dashboard insights: {str(e)}")


def _forecast_months(months: List[ForecastMonth]) -> List[ForecastMonthResponse]:
    return [ForecastMonthResponse.model_validate(m) for m in months]


@router.get("/cash-flow-forecast", response_model=CashFlowForecastResponse)
def cash_flow_forecast_endpoint(
    months: Optional[int] = Query(None, ge=1, le=24, description="Months to forecast"),
    as_of: Optional[date] = Query(None, description="Newest month of history to use"),
    db: Session = Depends(get_db),
) -> CashFlowForecastResponse:
    """
    Forecast monthly inflow and outflow from recorded payments.

    Uses up to six months of history and needs at least three. With less,
    the response carries ``sufficient_data=false`` and a message instead of
    numbers.
    """
    settings = get_settings()
    months = months or settings.forecast_default_months
    history = get_monthly_cash_flow(
        db, months=settings.forecast_history_window_months, as_of=as_of
    )
    historical = [
        MonthlyCashFlowResponse(
            month=m.month, inflow=m.inflow, outflow=m.outflow, net_flow=m.net_flow
        )
        for m in history
    ]

    result = forecast_cash_flow(history, months, settings.forecast_min_history_months)
    if isinstance(result, InsufficientData):
        return CashFlowForecastResponse(
            sufficient_data=False,
            message=result.message,
            historical=historical,
        )

    scenarios = forecast_scenarios(history, months, settings.forecast_min_history_months)
    return CashFlowForecastResponse(
        sufficient_data=True,
        historical=historical,
        forecast=_forecast_months(result.forecast),
        optimistic=_forecast_months(scenarios.optimistic),
        pessimistic=_forecast_months(scenarios.pessimistic),
        average_inflow=result.average_inflow,
        average_outflow=result.average_outflow,
        average_net_flow=result.average_net_flow,
        inflow_trend_percent=(result.inflow_trend * 100).quantize(CENT),
        outflow_trend_percent=(result.outflow_trend * 100).quantize(CENT),
    )
