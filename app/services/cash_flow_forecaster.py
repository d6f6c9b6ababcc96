"""Cash flow forecasting.

Formula-based short-term forecast: the historical average is extrapolated
along a simple oldest-to-newest trend, with a confidence figure that drops
the further out the month is. Not a statistical model.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence, Union

import structlog

logger = structlog.get_logger()

MIN_HISTORY_MONTHS = 3
DEFAULT_FORECAST_MONTHS = 3

MAX_CONFIDENCE = 90
MIN_CONFIDENCE = 40
CONFIDENCE_STEP = 10

# (inflow multiplier, outflow multiplier)
OPTIMISTIC = (Decimal("1.2"), Decimal("0.9"))
PESSIMISTIC = (Decimal("0.8"), Decimal("1.1"))

CENT = Decimal("0.01")


@dataclass(frozen=True)
class MonthlyCashFlow:
    """Cash in and out for one calendar month (``month`` is the 1st)."""
    month: date
    inflow: Decimal
    outflow: Decimal

    @property
    def net_flow(self) -> Decimal:
        return self.inflow - self.outflow


@dataclass(frozen=True)
class ForecastMonth:
    month: date
    projected_inflow: Decimal
    projected_outflow: Decimal
    projected_net_flow: Decimal
    confidence: int  # percent


@dataclass
class ForecastResult:
    forecast: List[ForecastMonth]
    historical_months: int
    average_inflow: Decimal
    average_outflow: Decimal
    average_net_flow: Decimal
    inflow_trend: Decimal  # fractional change per month
    outflow_trend: Decimal


@dataclass(frozen=True)
class InsufficientData:
    """Returned instead of a forecast when history is too short."""
    available_months: int
    required_months: int = MIN_HISTORY_MONTHS

    @property
    def message(self) -> str:
        return (
            f"Insufficient historical data (minimum {self.required_months} months "
            f"required, {self.available_months} available)"
        )


@dataclass
class ScenarioForecast:
    base: List[ForecastMonth]
    optimistic: List[ForecastMonth] = field(default_factory=list)
    pessimistic: List[ForecastMonth] = field(default_factory=list)


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _add_months(month: date, count: int) -> date:
    index = month.year * 12 + (month.month - 1) + count
    return date(index // 12, index % 12 + 1, 1)


def _trend(newest: Decimal, oldest: Decimal, months: int) -> Decimal:
    # A zero starting point would divide by zero; treat it as 1
    base = oldest if oldest != 0 else Decimal("1")
    return (newest - oldest) / base / months


def calculate_confidence(historical_months: int, forecast_month: int) -> int:
    """Confidence in percent: rises with history, falls with distance, 40..90."""
    base = min(MAX_CONFIDENCE, historical_months * CONFIDENCE_STEP)
    return max(MIN_CONFIDENCE, base - forecast_month * CONFIDENCE_STEP)


def forecast_cash_flow(
    history: Sequence[MonthlyCashFlow],
    months: int = DEFAULT_FORECAST_MONTHS,
    min_history: int = MIN_HISTORY_MONTHS,
) -> Union[ForecastResult, InsufficientData]:
    """
    Project inflow and outflow for the ``months`` following the newest record.

    Args:
        history: Monthly records, most recent first
        months: Number of months to forecast
        min_history: Months of history required

    Returns:
        ForecastResult, or InsufficientData when ``history`` is shorter than
        ``min_history``. Callers must check which one they got.
    """
    if months < 1:
        raise ValueError("months must be at least 1")

    n = len(history)
    if n < min_history:
        logger.info("Cash flow forecast skipped", available_months=n, required_months=min_history)
        return InsufficientData(available_months=n, required_months=min_history)

    average_inflow = sum((Decimal(m.inflow) for m in history), Decimal("0")) / n
    average_outflow = sum((Decimal(m.outflow) for m in history), Decimal("0")) / n

    newest, oldest = history[0], history[-1]
    inflow_trend = _trend(Decimal(newest.inflow), Decimal(oldest.inflow), n)
    outflow_trend = _trend(Decimal(newest.outflow), Decimal(oldest.outflow), n)

    forecast: List[ForecastMonth] = []
    for i in range(1, months + 1):
        projected_inflow = _cents(average_inflow * (1 + inflow_trend * i))
        projected_outflow = _cents(average_outflow * (1 + outflow_trend * i))
        forecast.append(ForecastMonth(
            month=_add_months(newest.month, i),
            projected_inflow=projected_inflow,
            projected_outflow=projected_outflow,
            projected_net_flow=projected_inflow - projected_outflow,
            confidence=calculate_confidence(n, i),
        ))

    logger.info(
        "Cash flow forecast generated",
        historical_months=n,
        forecast_months=months,
        inflow_trend=str(inflow_trend),
        outflow_trend=str(outflow_trend),
    )

    return ForecastResult(
        forecast=forecast,
        historical_months=n,
        average_inflow=_cents(average_inflow),
        average_outflow=_cents(average_outflow),
        average_net_flow=_cents(average_inflow - average_outflow),
        inflow_trend=inflow_trend,
        outflow_trend=outflow_trend,
    )


def _apply_scenario(forecast: Sequence[ForecastMonth], multipliers) -> List[ForecastMonth]:
    inflow_factor, outflow_factor = multipliers
    adjusted = []
    for month in forecast:
        inflow = _cents(month.projected_inflow * inflow_factor)
        outflow = _cents(month.projected_outflow * outflow_factor)
        adjusted.append(replace(
            month,
            projected_inflow=inflow,
            projected_outflow=outflow,
            projected_net_flow=inflow - outflow,
        ))
    return adjusted


def forecast_scenarios(
    history: Sequence[MonthlyCashFlow],
    months: int = DEFAULT_FORECAST_MONTHS,
    min_history: int = MIN_HISTORY_MONTHS,
) -> Union[ScenarioForecast, InsufficientData]:
    """
    Base, optimistic and pessimistic forecasts.

    Scenarios scale the base forecast: optimistic is inflow x1.2 and
    outflow x0.9, pessimistic inflow x0.8 and outflow x1.1.
    """
    base = forecast_cash_flow(history, months, min_history)
    if isinstance(base, InsufficientData):
        return base

    return ScenarioForecast(
        base=base.forecast,
        optimistic=_apply_scenario(base.forecast, OPTIMISTIC),
        pessimistic=_apply_scenario(base.forecast, PESSIMISTIC),
    )
