from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from services.input_validation import parse_amount, parse_signed_amount
from services.permissions import json_error, require_api_access
from services.projection_engine import (
    DEFAULT_SAMPLE_DAYS,
    ProjectionError,
    ProjectionResult,
    calculate_and_save_projections,
    initialize_user_projections,
    projection_params_from_config,
    recalculate_user_projections,
    summarize_net_worth,
)
from services.projection_repository import SqlAlchemyProjectionRepository

projection_bp = Blueprint("projection", __name__)

# Saldos atuais não podem ser negativos; fluxos mensais aceitam qualquer valor finito
REQUIRED_AMOUNTS = (
    ("current_assets", parse_amount),
    ("current_liabilities", parse_amount),
    ("monthly_income", parse_signed_amount),
    ("monthly_expenses", parse_signed_amount),
)

# fetch = banco indisponível na leitura; persist = falha ao gravar a série
ERROR_STATUS = {
    "fetch": 502,
    "persist": 500,
}


def _repository() -> SqlAlchemyProjectionRepository:
    return SqlAlchemyProjectionRepository()


def _result_response(result: ProjectionResult):
    if result.success:
        return jsonify(result.to_dict())
    error = result.error
    if error is None:
        return json_error("projection_failed", 500)
    return json_error(error.code, ERROR_STATUS.get(error.kind, 500))


@projection_bp.get("/api/projections")
@require_api_access
def projections_list():
    try:
        rows = _repository().list_projections(current_user.id)
    except ProjectionError as exc:
        current_app.logger.warning("Falha ao listar projecoes", exc_info=True)
        return json_error(exc.code, ERROR_STATUS[exc.kind])
    return jsonify({"projections": [p.to_dict() for p in rows]})


@projection_bp.post("/api/projections/recalculate")
@require_api_access
def projections_recalculate():
    result = recalculate_user_projections(
        _repository(),
        current_user.id,
        params=projection_params_from_config(current_app.config),
        sample_days=int(current_app.config.get("PROJECTION_SAMPLE_DAYS", DEFAULT_SAMPLE_DAYS)),
    )
    return _result_response(result)


@projection_bp.post("/api/projections/initialize")
@require_api_access
def projections_initialize():
    """Conta nova: cria o saldo zerado e a primeira série de projeção."""
    result = initialize_user_projections(
        _repository(),
        current_user.id,
        params=projection_params_from_config(current_app.config),
        sample_days=int(current_app.config.get("PROJECTION_SAMPLE_DAYS", DEFAULT_SAMPLE_DAYS)),
    )
    return _result_response(result)


@projection_bp.post("/api/projections/calculate")
@require_api_access
def projections_calculate():
    payload = request.get_json(silent=True) or {}

    amounts: dict[str, float] = {}
    for name, parser in REQUIRED_AMOUNTS:
        value = parser(payload.get(name))
        if value is None:
            return json_error(f"invalid_{name}", 422)
        amounts[name] = value

    monthly_savings = None
    if payload.get("monthly_savings") is not None:
        monthly_savings = parse_signed_amount(payload.get("monthly_savings"))
        if monthly_savings is None:
            return json_error("invalid_monthly_savings", 422)

    result = calculate_and_save_projections(
        _repository(),
        current_user.id,
        monthly_savings=monthly_savings,
        params=projection_params_from_config(current_app.config),
        **amounts,
    )
    return _result_response(result)


@projection_bp.get("/api/net-worth")
@require_api_access
def net_worth_summary():
    try:
        summary = summarize_net_worth(_repository(), current_user.id)
    except ProjectionError as exc:
        current_app.logger.warning("Falha ao calcular patrimonio atual", exc_info=True)
        return json_error(exc.code, ERROR_STATUS[exc.kind])
    return jsonify(summary)
