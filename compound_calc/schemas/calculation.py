"""Data contracts for the calculator HTTP API."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from compound_calc.core.formatting import CalculationSummary
from compound_calc.models import (
    CalculationHistoryRecord,
    CalculationParams,
    CalculationResult,
)


class PingResponse(BaseModel):
    message: str
    storage: str = Field(..., description="Configured storage backend.")


class FieldErrorItem(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    detail: List[FieldErrorItem]


class CalculationOptions(BaseModel):
    """Request flags sent alongside the calculation parameters."""

    save: StrictBool = Field(True, description="Record the calculation in history.")


class CalculationResponse(BaseModel):
    """Result of a calculation plus the outcome of saving it to history."""

    model_config = ConfigDict(extra="forbid")

    result: CalculationResult
    summary: CalculationSummary
    record: Optional[CalculationHistoryRecord] = Field(
        None,
        description="The stored history record; absent when saving was skipped or failed.",
    )
    saved: bool = Field(..., description="Whether the calculation was written to history.")
    warnings: List[str] = Field(default_factory=list)


class RecalculationResponse(BaseModel):
    """A history record's parameters fed back through the engine."""

    params: CalculationParams
    result: CalculationResult
    summary: CalculationSummary
