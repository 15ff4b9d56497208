"""Display helpers for calculation results."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from compound_calc.models import CalculationParams, CalculationResult

DEFAULT_CURRENCY_SYMBOL = "₱"


class FormulaTerm(BaseModel):
    symbol: str
    meaning: str


class DisplayRow(BaseModel):
    year: int
    date: Optional[str] = None
    balance: str
    interestEarned: str
    totalInterestToDate: str


class CalculationSummary(BaseModel):
    principal: str
    finalAmount: str
    totalInterest: str
    interestToPrincipalRatio: str
    formula: str
    legend: List[FormulaTerm]
    rows: List[DisplayRow]


def format_currency(value: float, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_percentage(value: float) -> str:
    """``value`` is already in percent units: 5 -> '5.00%'."""
    return f"{value:.2f}%"


def interest_to_principal_ratio(params: CalculationParams, result: CalculationResult) -> float:
    return result.totalInterest / params.principal * 100


def formula_legend(params: CalculationParams, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> List[FormulaTerm]:
    legend = [
        FormulaTerm(symbol="A", meaning="Final amount"),
        FormulaTerm(symbol="P", meaning=f"Principal ({format_currency(params.principal, symbol)})"),
        FormulaTerm(symbol="r", meaning=f"Annual interest rate ({params.rate:g}%)"),
        FormulaTerm(symbol="t", meaning=f"Time period ({params.time} years)"),
    ]
    if not params.frequency.is_continuous:
        legend.append(FormulaTerm(symbol="n", meaning="Number of times compounded per year"))
    return legend


def build_summary(
    params: CalculationParams,
    result: CalculationResult,
    symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> CalculationSummary:
    rows = [
        DisplayRow(
            year=row.year,
            date=row.date,
            balance=format_currency(row.amount, symbol),
            interestEarned=format_currency(row.interestEarned, symbol),
            totalInterestToDate=format_currency(row.amount - params.principal, symbol),
        )
        for row in result.yearlyBreakdown
    ]
    return CalculationSummary(
        principal=format_currency(params.principal, symbol),
        finalAmount=format_currency(result.finalAmount, symbol),
        totalInterest=format_currency(result.totalInterest, symbol),
        interestToPrincipalRatio=format_percentage(interest_to_principal_ratio(params, result)),
        formula=result.formula,
        legend=formula_legend(params, symbol),
        rows=rows,
    )
