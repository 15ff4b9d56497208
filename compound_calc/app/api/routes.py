"""HTTP routes for the Flask API."""

import logging
from http import HTTPStatus
from typing import Any, Dict, List

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from compound_calc.core.compounding import calculate_compound_interest
from compound_calc.core.formatting import build_summary
from compound_calc.core.validation import field_errors_from, parse_params, validate_params
from compound_calc.domain.errors import (
    CalculationOverflowError,
    FieldError,
    HistoryWriteError,
    ParamsValidationError,
)
from compound_calc.schemas.calculation import (
    CalculationOptions,
    CalculationResponse,
    PingResponse,
    RecalculationResponse,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _services():
    return current_app.extensions["compound_calc"]


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", exclude_none=True)


def _error_body(errors: List[FieldError]) -> Dict[str, Any]:
    return {"detail": [error.to_dict() for error in errors]}


@api_bp.errorhandler(ParamsValidationError)
def _handle_params_error(exc: ParamsValidationError):
    """Report every failing field at once; nothing is computed."""
    return jsonify(_error_body(exc.errors)), HTTPStatus.UNPROCESSABLE_ENTITY


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return jsonify(_error_body(field_errors_from(exc))), HTTPStatus.UNPROCESSABLE_ENTITY


@api_bp.errorhandler(CalculationOverflowError)
def _handle_overflow(exc: CalculationOverflowError):
    return (
        jsonify(_error_body([FieldError(field="__root__", message=str(exc))])),
        HTTPStatus.UNPROCESSABLE_ENTITY,
    )


@api_bp.errorhandler(HistoryWriteError)
def _handle_write_error(exc: HistoryWriteError):
    return jsonify({"error": str(exc)}), HTTPStatus.SERVICE_UNAVAILABLE


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(message="pong", storage=_services().settings.storage_backend)
    return jsonify(response.model_dump())


@api_bp.post("/calc/compound")
def compound() -> Any:
    """Calculate compound interest and, unless ``save`` is false, record it in history."""
    raw_payload = request.get_json(force=True, silent=False)
    options = CalculationOptions()
    errors: List[FieldError] = []
    if isinstance(raw_payload, dict):
        raw_payload = dict(raw_payload)
        if "save" in raw_payload:
            try:
                options = CalculationOptions.model_validate({"save": raw_payload.pop("save")})
            except ValidationError as exc:
                errors.extend(field_errors_from(exc))

    errors.extend(validate_params(raw_payload))
    if errors:
        raise ParamsValidationError(errors)

    params = parse_params(raw_payload)
    result = calculate_compound_interest(params)
    services = _services()

    warnings: List[str] = []
    try:
        services.form_state.save(params)
    except HistoryWriteError:
        logger.warning("Last form parameters were not stored", exc_info=True)

    record = None
    if options.save:
        try:
            record = services.history.save(params, result)
        except HistoryWriteError as exc:
            warnings.append(f"The calculation succeeded but was not saved to history: {exc}")

    response = CalculationResponse(
        result=result,
        summary=build_summary(params, result, services.settings.currency_symbol),
        record=record,
        saved=record is not None,
        warnings=warnings,
    )
    return jsonify(_dump(response))


@api_bp.get("/history")
def list_history() -> Any:
    return jsonify([_dump(record) for record in _services().history.list()])


@api_bp.delete("/history")
def clear_history() -> Any:
    _services().history.clear()
    return "", HTTPStatus.NO_CONTENT


@api_bp.get("/history/<record_id>")
def get_history_record(record_id: str) -> Any:
    record = _services().history.get(record_id)
    if record is None:
        return jsonify({"error": f"no calculation with id {record_id}"}), HTTPStatus.NOT_FOUND
    return jsonify(_dump(record))


@api_bp.post("/history/<record_id>/recalculate")
def recalculate_history_record(record_id: str) -> Any:
    """Feed a stored record's parameters back through the engine without saving again."""
    services = _services()
    record = services.history.get(record_id)
    if record is None:
        return jsonify({"error": f"no calculation with id {record_id}"}), HTTPStatus.NOT_FOUND

    params = record.to_params()
    result = calculate_compound_interest(params)
    response = RecalculationResponse(
        params=params,
        result=result,
        summary=build_summary(params, result, services.settings.currency_symbol),
    )
    return jsonify(_dump(response))


@api_bp.delete("/history/<record_id>")
def delete_history_record(record_id: str) -> Any:
    _services().history.delete_by_id(record_id)
    return "", HTTPStatus.NO_CONTENT


@api_bp.get("/params/last")
def last_params() -> Any:
    return jsonify(_dump(_services().form_state.load()))


@api_bp.put("/params/last")
def store_last_params() -> Any:
    params = parse_params(request.get_json(force=True, silent=False))
    _services().form_state.save(params)
    return jsonify(_dump(params))
