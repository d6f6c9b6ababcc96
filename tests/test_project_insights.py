"""Tests for project health and dashboard insights."""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.orm import Session

from app.domain.accounting.enums import (
    InvoiceStatus,
    InvoiceType,
    PaymentMethod,
    ProjectHealth,
    ProjectStatus,
)
from app.domain.accounting.exceptions import NotFoundError
from app.domain.accounting.invoice_service import create_invoice, record_payment
from app.domain.projects.insight_service import (
    budget_usage_percent,
    get_dashboard_insights,
    get_project_progress_insights,
)
from app.domain.projects.project_service import create_project, update_project_progress


def _spend(db: Session, vendor, project, amount, number):
    create_invoice(
        db,
        invoice_number=number,
        invoice_type=InvoiceType.PAYABLE,
        invoice_date=date(2024, 1, 1),
        due_date=date(2025, 12, 31),
        subtotal=Decimal(amount),
        vendor_id=vendor.id,
        project_id=project.id,
    )


def _progress(db: Session, project, planned, actual, status=ProjectStatus.ACTIVE):
    update_project_progress(
        db, project.id,
        planned_progress=Decimal(planned),
        actual_progress=Decimal(actual),
        status=status,
    )


# ============================================
# PROJECT HEALTH
# ============================================

def test_project_on_plan_is_good(db: Session, vendor, project):
    _spend(db, vendor, project, "40000", "BILL-1")
    _progress(db, project, "40", "40")

    insights = get_project_progress_insights(db, project.id)

    assert insights["health_status"] == ProjectHealth.GOOD
    assert insights["health_score"] == 100
    assert insights["metrics"]["budget"]["usage_percent"] == Decimal("40.00")
    assert insights["metrics"]["budget"]["remaining"] == Decimal("60000.00")
    assert insights["insights"] == {
        "is_on_schedule": True,
        "is_within_budget": True,
        "budget_deviation": Decimal("0.00"),
    }


def test_behind_and_overspent_is_critical(db: Session, vendor, project):
    _spend(db, vendor, project, "75000", "BILL-1")
    _progress(db, project, "60", "40")

    insights = get_project_progress_insights(db, project.id)

    assert insights["health_status"] == ProjectHealth.CRITICAL
    assert insights["health_score"] == 20
    assert insights["metrics"]["progress"]["deviation"] == Decimal("-20.00")
    assert insights["insights"]["budget_deviation"] == Decimal("35.00")
    assert insights["insights"]["is_on_schedule"] is False
    assert insights["insights"]["is_within_budget"] is False


def test_moderate_deviation_is_poor(db: Session, vendor, project):
    _spend(db, vendor, project, "52000", "BILL-1")
    _progress(db, project, "47", "40")

    insights = get_project_progress_insights(db, project.id)

    assert insights["health_status"] == ProjectHealth.POOR
    assert insights["health_score"] == 60


def test_schedule_critical_is_not_downgraded_by_budget(db: Session, vendor, project):
    _spend(db, vendor, project, "52000", "BILL-1")
    _progress(db, project, "60", "40")

    insights = get_project_progress_insights(db, project.id)

    assert insights["health_status"] == ProjectHealth.CRITICAL
    assert insights["health_score"] == 40


def test_spend_against_zero_budget_is_critical(db: Session, vendor):
    unfunded = create_project(
        db, project_code="PRJ-0", project_name="Site Survey", budget=Decimal("0"),
        status=ProjectStatus.ACTIVE,
    )
    _spend(db, vendor, unfunded, "500", "BILL-0")

    insights = get_project_progress_insights(db, unfunded.id)

    assert insights["metrics"]["budget"]["usage_percent"] is None
    assert insights["insights"]["budget_deviation"] is None
    assert insights["insights"]["is_within_budget"] is False
    assert insights["health_status"] == ProjectHealth.CRITICAL


def test_unknown_project_health(db: Session):
    with pytest.raises(NotFoundError):
        get_project_progress_insights(db, uuid4())


def test_budget_usage_percent():
    assert budget_usage_percent(Decimal("200"), Decimal("50")) == Decimal("25.00")
    assert budget_usage_percent(Decimal("0"), Decimal("0")) == Decimal("0.00")
    assert budget_usage_percent(Decimal("0"), Decimal("1")) is None


# ============================================
# DASHBOARD
# ============================================

def _receivable(db: Session, customer, number, amount, invoice_date, due_date, project=None):
    return create_invoice(
        db,
        invoice_number=number,
        invoice_type=InvoiceType.RECEIVABLE,
        invoice_date=invoice_date,
        due_date=due_date,
        subtotal=Decimal(amount),
        customer_id=customer.id,
        project_id=project.id if project else None,
        status=InvoiceStatus.SENT,
    )


def _pay(db: Session, invoice, amount, number):
    record_payment(
        db,
        invoice_id=invoice.id,
        amount=Decimal(amount),
        payment_number=number,
        payment_date=invoice.invoice_date,
        payment_method=PaymentMethod.CHECK,
    )


def _portfolio(db: Session, customer, vendor, project):
    _spend(db, vendor, project, "95000", "BILL-1")
    _progress(db, project, "50", "50")

    bridge = create_project(
        db, project_code="PRJ-002", project_name="Harbor Bridge", budget=Decimal("50000"),
        status=ProjectStatus.ON_HOLD, planned_progress=Decimal("60"), actual_progress=Decimal("40"),
    )
    _spend(db, vendor, bridge, "10000", "BILL-2")

    yard = create_project(
        db, project_code="PRJ-003", project_name="Depot Yard", budget=Decimal("10000"),
    )
    _spend(db, vendor, yard, "8800", "BILL-3")

    finished = create_project(
        db, project_code="PRJ-004", project_name="Old Depot", budget=Decimal("1000"),
        status=ProjectStatus.COMPLETED, planned_progress=Decimal("100"), actual_progress=Decimal("100"),
    )
    _spend(db, vendor, finished, "5000", "BILL-4")

    return bridge, yard


def test_dashboard_flags_risky_projects_and_budget_alerts(db: Session, customer, vendor, project):
    bridge, yard = _portfolio(db, customer, vendor, project)
    _receivable(db, customer, "INV-1", "1000", date(2024, 1, 1), date(2024, 1, 31), project)

    dashboard = get_dashboard_insights(db, as_of=date(2024, 3, 1))

    high_risk = dashboard["high_risk_projects"]
    assert [p["project_id"] for p in high_risk] == [project.id, bridge.id]
    assert high_risk[0]["usage_percent"] == Decimal("95.00")
    assert high_risk[0]["overdue_invoices"] == 1
    assert high_risk[1]["overdue_invoices"] == 0

    alerts = dashboard["budget_alerts"]
    assert [a["project_id"] for a in alerts] == [project.id, yard.id]
    assert alerts[1]["usage_percent"] == Decimal("88.00")

    assert dashboard["summary"]["critical_projects"] == 2
    assert dashboard["summary"]["projects_over_budget"] == 2


def test_dashboard_overdue_totals_by_type(db: Session, customer, vendor):
    invoice = _receivable(db, customer, "INV-1", "1000", date(2024, 1, 1), date(2024, 1, 31))
    _pay(db, invoice, "300", "PAY-1")
    create_invoice(
        db,
        invoice_number="BILL-OD",
        invoice_type=InvoiceType.PAYABLE,
        invoice_date=date(2024, 1, 15),
        due_date=date(2024, 2, 15),
        subtotal=Decimal("400"),
        vendor_id=vendor.id,
        status=InvoiceStatus.SENT,
    )
    _receivable(db, customer, "INV-2", "900", date(2024, 2, 1), date(2024, 3, 31))

    dashboard = get_dashboard_insights(db, as_of=date(2024, 3, 1))
    overdue = {o["invoice_type"]: o for o in dashboard["overdue_payments"]}

    assert overdue[InvoiceType.RECEIVABLE]["count"] == 1
    assert overdue[InvoiceType.RECEIVABLE]["total_amount"] == Decimal("700.00")
    assert overdue[InvoiceType.PAYABLE]["total_amount"] == Decimal("400.00")
    assert dashboard["summary"]["total_overdue"] == Decimal("1100.00")


def test_dashboard_revenue_trend_counts_paid_receivables(db: Session, customer):
    for number, amount, invoice_date in (
        ("INV-P1", "500", date(2024, 2, 10)),
        ("INV-P2", "250", date(2024, 2, 20)),
        ("INV-P3", "100", date(2023, 8, 1)),
    ):
        invoice = _receivable(db, customer, number, amount, invoice_date, date(2024, 12, 31))
        _pay(db, invoice, amount, f"PAY-{number}")
    _receivable(db, customer, "INV-OPEN", "999", date(2024, 2, 1), date(2024, 12, 31))

    dashboard = get_dashboard_insights(db, as_of=date(2024, 3, 1))

    assert dashboard["revenue_trend"] == [
        {"month": date(2024, 2, 1), "revenue": Decimal("750.00")},
    ]


def test_empty_dashboard(db: Session):
    dashboard = get_dashboard_insights(db, as_of=date(2024, 3, 1))

    assert dashboard["high_risk_projects"] == []
    assert dashboard["overdue_payments"] == []
    assert dashboard["budget_alerts"] == []
    assert dashboard["summary"]["total_overdue"] == Decimal("0.00")
