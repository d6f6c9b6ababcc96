"""Tests for project risk scoring."""

import pytest
from decimal import Decimal

from app.domain.accounting.enums import ProjectStatus, RiskLevel
from app.services.risk_scorer import (
    ON_TRACK_RECOMMENDATIONS,
    ProjectSnapshot,
    risk_level_for,
    score_project_risk,
    score_projects,
)


def _snapshot(
    budget="100000",
    spent="0",
    planned="0",
    actual="0",
    status=ProjectStatus.ACTIVE,
    overdue=0,
) -> ProjectSnapshot:
    return ProjectSnapshot(
        budget=Decimal(budget),
        spent=Decimal(spent),
        planned_progress=Decimal(planned),
        actual_progress=Decimal(actual),
        status=status,
        overdue_invoices=overdue,
    )


def _factor_names(result):
    return [f.factor for f in result.factors]


def test_on_track_project_scores_zero():
    result = score_project_risk(_snapshot(spent="40000", planned="40", actual="40"))

    assert result.score == 0
    assert result.level == RiskLevel.LOW
    assert result.factors == []
    assert result.recommendations == ON_TRACK_RECOMMENDATIONS


@pytest.mark.parametrize(
    "spent,actual,points,name",
    [
        ("75000", "40", 40, "Critical Budget Overrun"),
        ("65000", "40", 30, "High Budget Usage"),
        ("55000", "40", 15, "Moderate Budget Concern"),
        ("50000", "40", 0, None),
    ],
)
def test_budget_overrun_bands(spent, actual, points, name):
    result = score_project_risk(_snapshot(spent=spent, planned=actual, actual=actual))

    assert result.score == points
    if name:
        assert _factor_names(result) == [name]
    else:
        assert result.factors == []


@pytest.mark.parametrize(
    "planned,actual,points,name",
    [
        ("65", "40", 30, "Severe Schedule Delay"),
        ("55", "40", 20, "Schedule Delay"),
        ("46", "40", 10, "Minor Schedule Concern"),
        ("45", "40", 0, None),
    ],
)
def test_schedule_delay_bands(planned, actual, points, name):
    result = score_project_risk(_snapshot(spent="40000", planned=planned, actual=actual))

    assert result.score == points
    if name:
        assert _factor_names(result) == [name]


@pytest.mark.parametrize(
    "overdue,points",
    [(0, 0), (1, 5), (2, 5), (3, 15), (5, 15), (6, 20)],
)
def test_overdue_invoice_bands(overdue, points):
    result = score_project_risk(_snapshot(overdue=overdue))
    assert result.score == points


def test_on_hold_adds_points():
    result = score_project_risk(_snapshot(status=ProjectStatus.ON_HOLD))

    assert result.score == 10
    assert _factor_names(result) == ["Project On Hold"]
    assert "Resume project or update status" in result.recommendations


def test_worst_case_is_critical_and_capped():
    result = score_project_risk(_snapshot(
        spent="90000", planned="60", actual="10", status=ProjectStatus.ON_HOLD, overdue=9,
    ))

    assert result.score == 100
    assert result.level == RiskLevel.CRITICAL
    assert len(result.factors) == 4


def test_zero_budget_with_spend_is_critical_overrun():
    result = score_project_risk(_snapshot(budget="0", spent="50000", planned="10", actual="10"))

    assert result.score == 40
    assert _factor_names(result) == ["Critical Budget Overrun"]
    assert result.level == RiskLevel.MEDIUM


def test_zero_budget_without_spend_scores_zero():
    result = score_project_risk(_snapshot(budget="0", spent="0"))
    assert result.score == 0


def test_more_overdue_invoices_never_lowers_score():
    scores = [score_project_risk(_snapshot(overdue=n)).score for n in range(10)]
    assert scores == sorted(scores)


def test_more_spend_never_lowers_score():
    scores = [
        score_project_risk(_snapshot(spent=str(spent), planned="30", actual="30")).score
        for spent in range(0, 100001, 5000)
    ]
    assert scores == sorted(scores)


@pytest.mark.parametrize(
    "score,level",
    [
        (0, RiskLevel.LOW),
        (29, RiskLevel.LOW),
        (30, RiskLevel.MEDIUM),
        (49, RiskLevel.MEDIUM),
        (50, RiskLevel.HIGH),
        (69, RiskLevel.HIGH),
        (70, RiskLevel.CRITICAL),
        (100, RiskLevel.CRITICAL),
    ],
)
def test_level_thresholds(score, level):
    assert risk_level_for(score) == level


def test_factors_as_dicts_shape():
    result = score_project_risk(_snapshot(overdue=1))
    assert result.factors_as_dicts() == [
        {"factor": "Some Overdue Invoices", "score": 5, "description": "1 overdue invoice(s)"}
    ]


def test_score_projects_batch():
    results = score_projects([_snapshot(), _snapshot(overdue=3)])
    assert [r.score for r in results] == [0, 15]
