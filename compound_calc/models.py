from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompoundingFrequency(str, Enum):
    ANNUALLY = "annually"
    SEMI_ANNUALLY = "semi-annually"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"
    CONTINUOUSLY = "continuously"

    @property
    def periods_per_year(self) -> Optional[int]:
        """Compounding periods per year; None for continuous compounding."""
        return _PERIODS_PER_YEAR.get(self)

    @property
    def is_continuous(self) -> bool:
        return self is CompoundingFrequency.CONTINUOUSLY


_PERIODS_PER_YEAR = {
    CompoundingFrequency.ANNUALLY: 1,
    CompoundingFrequency.SEMI_ANNUALLY: 2,
    CompoundingFrequency.QUARTERLY: 4,
    CompoundingFrequency.MONTHLY: 12,
    CompoundingFrequency.WEEKLY: 52,
    CompoundingFrequency.DAILY: 365,
}


def _coerce_start_date(value: Any) -> Any:
    """
    Accept the full ISO timestamps written by the browser app ("2024-03-01T08:15:00.000Z").

    Only the UTC calendar date is kept. The writer's time zone is not stored,
    so a local midnight east of UTC (2024-03-01 at +08:00 is
    "2024-02-29T16:00:00.000Z") reads back as the previous day.
    """
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if "T" in value:
            return value.split("T", 1)[0]
    return value


class CalculationParams(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)

    principal: float = Field(gt=0)
    rate: float = Field(gt=0, description="Nominal annual rate in percent (5 means 5%).")
    time: int = Field(ge=1, description="Whole number of years.")
    frequency: CompoundingFrequency
    startDate: Optional[date] = None

    @field_validator("startDate", mode="before")
    @classmethod
    def parse_start_date(cls, value: Any) -> Any:
        return _coerce_start_date(value)


class YearlyBreakdownRow(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int = Field(ge=1)
    amount: float
    interestEarned: float
    date: Optional[str] = None


class CalculationResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    finalAmount: float
    totalInterest: float
    yearlyBreakdown: List[YearlyBreakdownRow]
    formula: str


class CalculationHistoryRecord(CalculationParams, CalculationResult):
    # newer writers may add fields; old readers must still load the record
    model_config = ConfigDict(extra="ignore", frozen=True, allow_inf_nan=False)

    id: str = Field(min_length=1)
    createdAt: str

    def to_params(self) -> CalculationParams:
        return CalculationParams(
            principal=self.principal,
            rate=self.rate,
            time=self.time,
            frequency=self.frequency,
            startDate=self.startDate,
        )

    def to_result(self) -> CalculationResult:
        return CalculationResult(
            finalAmount=self.finalAmount,
            totalInterest=self.totalInterest,
            yearlyBreakdown=self.yearlyBreakdown,
            formula=self.formula,
        )


DEFAULT_PARAMS = CalculationParams(
    principal=10000,
    rate=5,
    time=10,
    frequency=CompoundingFrequency.ANNUALLY,
)
