"""Field-level validation of calculator inputs."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pydantic import ValidationError

from compound_calc.domain.errors import FieldError, ParamsValidationError
from compound_calc.models import CalculationParams, CompoundingFrequency

FIELD_MESSAGES: Dict[str, str] = {
    "principal": "Principal amount must be greater than 0",
    "rate": "Interest rate must be greater than 0",
    "time": "Time period must be a positive integer",
    "frequency": "Compounding frequency must be one of: "
    + ", ".join(frequency.value for frequency in CompoundingFrequency),
    "startDate": "Start date must be a valid calendar date",
    "save": "save must be true or false",
}


def field_errors_from(exc: ValidationError) -> List[FieldError]:
    """Collapse pydantic errors into one user-facing message per field."""
    errors: List[FieldError] = []
    seen = set()
    for error in exc.errors():
        loc = error.get("loc") or ("__root__",)
        field = str(loc[0])
        if field in seen:
            continue
        seen.add(field)
        if error.get("type") == "extra_forbidden":
            message = f"Unknown field '{field}'"
        elif error.get("type") == "missing" and field in FIELD_MESSAGES:
            message = f"{FIELD_MESSAGES[field]} (field is required)"
        else:
            message = FIELD_MESSAGES.get(field, error.get("msg", "Invalid value"))
        errors.append(FieldError(field=field, message=message))
    return errors


def validate_params(raw: Any) -> List[FieldError]:
    """Return the failing fields of ``raw``; an empty list means it is valid."""
    if isinstance(raw, CalculationParams):
        return []
    if not isinstance(raw, Mapping):
        return [FieldError(field="__root__", message="Calculation parameters must be a JSON object")]
    try:
        CalculationParams.model_validate(dict(raw))
    except ValidationError as exc:
        return field_errors_from(exc)
    return []


def parse_params(raw: Any) -> CalculationParams:
    if isinstance(raw, CalculationParams):
        return raw
    errors = validate_params(raw)
    if errors:
        raise ParamsValidationError(errors)
    return CalculationParams.model_validate(dict(raw))
