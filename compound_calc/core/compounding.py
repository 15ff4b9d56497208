"""Compound interest engine."""

from __future__ import annotations

import calendar
import math
from datetime import date
from typing import List, Optional

from compound_calc.domain.errors import CalculationOverflowError
from compound_calc.models import (
    CalculationParams,
    CalculationResult,
    CompoundingFrequency,
    YearlyBreakdownRow,
)

CONTINUOUS_FORMULA = "A = P × e^(rt)"
DISCRETE_FORMULA = "A = P(1 + r/n)^(nt)"


def periods_per_year(frequency: CompoundingFrequency) -> Optional[int]:
    return CompoundingFrequency(frequency).periods_per_year


def formula_for(frequency: CompoundingFrequency) -> str:
    if CompoundingFrequency(frequency).is_continuous:
        return CONTINUOUS_FORMULA
    return DISCRETE_FORMULA


def amount_at_year(params: CalculationParams, year: int) -> float:
    """Balance after ``year`` whole years; year 0 is the principal itself."""
    if year == 0:
        return params.principal

    r = params.rate / 100
    try:
        if params.frequency.is_continuous:
            amount = params.principal * math.exp(r * year)
        else:
            n = params.frequency.periods_per_year
            amount = params.principal * (1 + r / n) ** (n * year)
    except OverflowError as exc:
        raise CalculationOverflowError(_overflow_message(params, year)) from exc

    if not math.isfinite(amount):
        raise CalculationOverflowError(_overflow_message(params, year))
    return amount


def shift_years(start: date, years: int) -> date:
    """Same month/day ``years`` later; 29 February rolls over to 1 March."""
    target_year = start.year + years
    if start.month == 2 and start.day == 29 and not calendar.isleap(target_year):
        return date(target_year, 3, 1)
    return start.replace(year=target_year)


def calculate_compound_interest(params: CalculationParams) -> CalculationResult:
    """
    Compute final amount, total interest and the year-by-year breakdown.

    For each year y in 1..time:
      1) amount(y) from the closed form for the frequency (no rounding).
      2) interestEarned = amount(y) - amount(y - 1), with amount(0) = principal.
      3) date = startDate shifted by y years, when a start date was given.

    The final amount is amount(time), so the last row always matches it.
    """
    rows: List[YearlyBreakdownRow] = []
    previous = amount_at_year(params, 0)

    for year in range(1, params.time + 1):
        amount = amount_at_year(params, year)
        row_date = (
            shift_years(params.startDate, year).isoformat()
            if params.startDate is not None
            else None
        )
        rows.append(
            YearlyBreakdownRow(
                year=year,
                amount=amount,
                interestEarned=amount - previous,
                date=row_date,
            )
        )
        previous = amount

    final_amount = amount_at_year(params, params.time)
    return CalculationResult(
        finalAmount=final_amount,
        totalInterest=final_amount - params.principal,
        yearlyBreakdown=rows,
        formula=formula_for(params.frequency),
    )


def _overflow_message(params: CalculationParams, year: int) -> str:
    return (
        f"balance overflows at year {year} for principal={params.principal}, "
        f"rate={params.rate}%, frequency={params.frequency.value}"
    )
