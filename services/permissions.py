from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import jsonify
from flask_login import current_user


@dataclass(frozen=True)
class AccessDecision:
    ok: bool
    status: int = 200
    error: str | None = None


def json_error(error: str, status: int):
    return jsonify({"error": error}), status


def evaluate_access(user) -> AccessDecision:
    if not user or not getattr(user, "is_authenticated", False):
        return AccessDecision(False, 401, "not_authenticated")
    return AccessDecision(True)


def require_api_access(fn):
    """Decorator para rotas JSON: responde 401 em JSON em vez de redirecionar."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        decision = evaluate_access(current_user)
        if not decision.ok:
            return json_error(decision.error or "forbidden", decision.status)
        return fn(*args, **kwargs)

    return wrapper
