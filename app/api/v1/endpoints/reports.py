"""Reporting API endpoints."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, HTTPException
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.domain.accounting.enums import InvoiceType
from app.services.reporting_service import (
    get_aging_report,
    get_balance_sheet,
    get_income_statement,
    get_monthly_cash_flow,
)
from app.schemas.insights import MonthlyCashFlowResponse
from app.schemas.reporting import (
    AgingReportResponse,
    BalanceSheetResponse,
    IncomeStatementResponse,
)

router = APIRouter()


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
def get_balance_sheet_report(
    as_of: Optional[date] = Query(None, description="As-of date (defaults to today)"),
    db: Session = Depends(get_db),
) -> BalanceSheetResponse:
    """
    Get Balance Sheet report.

    Built from posted lines dated on or before as_of; unclosed revenue
    less expenses is reported as current earnings within equity.
    """
    try:
        result = get_balance_sheet(db=db, as_of=as_of)
        return BalanceSheetResponse(**result)
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error generating Balance Sheet: {str(e)}"
        )


@router.get("/income-statement", response_model=IncomeStatementResponse)
def get_income_statement_report(
    date_from: date = Query(..., description="Start date"),
    date_to: date = Query(..., description="End date"),
    db: Session = Depends(get_db),
) -> IncomeStatementResponse:
    """
    Get Income Statement report.

    Sums posted journal lines on revenue and expense accounts in the range.
    """
    if date_to < date_from:
        raise HTTPException(status_code=400, detail="date_to must not be before date_from")
    try:
        result = get_income_statement(db=db, date_from=date_from, date_to=date_to)
        return IncomeStatementResponse(**result)
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error generating Income Statement: {str(e)}"
        )


@router.get("/cash-flow", response_model=List[MonthlyCashFlowResponse])
def get_cash_flow_report(
    months: int = Query(6, ge=1, le=36, description="Months of history"),
    as_of: Optional[date] = Query(None, description="Latest date to include"),
    db: Session = Depends(get_db),
) -> List[MonthlyCashFlowResponse]:
    """
    Get monthly cash flow from recorded payments, most recent month first.

    Receivable payments are inflow, payable payments outflow.
    """
    try:
        history = get_monthly_cash_flow(db=db, months=months, as_of=as_of)
        return [
            MonthlyCashFlowResponse(
                month=m.month, inflow=m.inflow, outflow=m.outflow, net_flow=m.net_flow
            )
            for m in history
        ]
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error generating Cash Flow report: {str(e)}"
        )


@router.get("/aging", response_model=AgingReportResponse)
def get_aging(
    invoice_type: InvoiceType = Query(InvoiceType.RECEIVABLE, description="receivable or payable"),
    as_of: Optional[date] = Query(None, description="As-of date (defaults to today)"),
    db: Session = Depends(get_db),
) -> AgingReportResponse:
    """Get receivables or payables aging by days past due."""
    try:
        result = get_aging_report(db=db, invoice_type=invoice_type, as_of=as_of)
        return AgingReportResponse(**result)
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error generating Aging report: {str(e)}"
        )
