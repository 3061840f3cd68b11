"""Aggregation behind the admin report: balance, totals and chart points."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from fintrack.models.movements import Movement, MovementType
from fintrack.schemas.movements import ChartPoint, MovementOut, ReportOut, ReportStatistics

CHART_POINTS = 12


def build_report(movements: Sequence[Movement]) -> ReportOut:
    """
    Build the report from movements ordered oldest first.

    The chart shows the last `CHART_POINTS` movements with signed amounts
    (expenses negative), numbered from 1.
    """

    total_income = sum((m.amount for m in movements if m.type == MovementType.INCOME.value), Decimal("0"))
    total_expense = sum((m.amount for m in movements if m.type == MovementType.EXPENSE.value), Decimal("0"))

    chart_data = [
        ChartPoint(
            index=i,
            id=m.id,
            concept=m.concept,
            amount=m.signed_amount,
            type=m.type,
            date=m.date,
            user=m.user_name,
        )
        for i, m in enumerate(movements[-CHART_POINTS:], start=1)
    ]

    return ReportOut(
        balance=total_income - total_expense,
        chart_data=chart_data,
        statistics=ReportStatistics(
            total_income=total_income,
            total_expense=total_expense,
            movement_count=len(movements),
        ),
        movements=[MovementOut.model_validate(m) for m in movements],
    )
