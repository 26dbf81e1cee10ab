"""Projeção de patrimônio líquido em 10 anos.

Dois pontos de entrada:

- calculate_and_save_projections: simula a série a partir de valores
  informados e substitui a série salva do usuário;
- recalculate_user_projections: monta as entradas a partir do banco
  (ativos, dívidas, transações dos últimos 30 dias) e delega para a
  função acima.

O acesso a dados é sempre feito por um repositório injetado
(ver services/projection_repository.py).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)

FETCH = "fetch"
PERSIST = "persist"

DEFAULT_ASSET_GROWTH_RATE = 0.12
DEFAULT_LIABILITY_REDUCTION_RATE = 0.10
DEFAULT_YEARS = 10
DEFAULT_SAMPLE_DAYS = 30


class ProjectionError(RuntimeError):
    """Falha de leitura (fetch) ou gravação (persist) da projeção."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind

    @property
    def code(self) -> str:
        return f"projection_{self.kind}_failed"


@dataclass(frozen=True)
class ProjectionParams:
    asset_growth_rate: float = DEFAULT_ASSET_GROWTH_RATE
    liability_reduction_rate: float = DEFAULT_LIABILITY_REDUCTION_RATE
    years: int = DEFAULT_YEARS


def projection_params_from_config(config: Mapping[str, Any]) -> ProjectionParams:
    return ProjectionParams(
        asset_growth_rate=float(config.get("PROJECTION_ASSET_GROWTH_RATE", DEFAULT_ASSET_GROWTH_RATE)),
        liability_reduction_rate=float(
            config.get("PROJECTION_LIABILITY_REDUCTION_RATE", DEFAULT_LIABILITY_REDUCTION_RATE)
        ),
        years=int(config.get("PROJECTION_YEARS", DEFAULT_YEARS)),
    )


@dataclass(frozen=True)
class ProjectionYear:
    year: int
    year_number: int
    projected_assets: float
    projected_liabilities: float
    net_worth: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "year_number": self.year_number,
            "investment_corpus": round(self.projected_assets, 2),
            "assets_value": round(self.projected_assets, 2),
            "liabilities_value": round(self.projected_liabilities, 2),
            "net_worth": round(self.net_worth, 2),
        }


@dataclass(frozen=True)
class ProjectionResult:
    success: bool
    projections: list[ProjectionYear] = field(default_factory=list)
    error: ProjectionError | None = None

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {
                "success": False,
                "error": self.error.code if self.error else "projection_failed",
            }
        return {
            "success": True,
            "projections": [p.to_dict() for p in self.projections],
        }


def simulate_projection(
    *,
    current_assets: float,
    current_liabilities: float,
    monthly_income: float,
    monthly_expenses: float,
    monthly_savings: float | None = None,
    start_year: int | None = None,
    params: ProjectionParams | None = None,
) -> list[ProjectionYear]:
    """Simula a série ano a ano (função pura, sem acesso a banco).

    A poupança anual é calculada uma vez e somada igual em todos os anos
    (premissa de manter o padrão de vida atual).
    """
    params = params or ProjectionParams()
    if start_year is None:
        start_year = date.today().year

    if monthly_savings is None:
        monthly_savings = float(monthly_income) - float(monthly_expenses)
    annual_savings = float(monthly_savings) * 12

    growth = 1 + float(params.asset_growth_rate)
    decay = 1 - float(params.liability_reduction_rate)

    assets = float(current_assets)
    liabilities = float(current_liabilities)

    projections: list[ProjectionYear] = []
    for i in range(int(params.years)):
        assets = assets * growth + annual_savings
        liabilities = max(0.0, liabilities * decay)
        projections.append(
            ProjectionYear(
                year=start_year + i,
                year_number=i + 1,
                projected_assets=assets,
                projected_liabilities=liabilities,
                net_worth=assets - liabilities,
            )
        )
    return projections


def derive_monthly_cashflow(transactions: Iterable, balance) -> tuple[float, float]:
    """Receita/despesa mensal a partir das transações da janela.

    Para cada tipo sem nenhuma transação na janela, usa o total acumulado
    salvo em account_balance (ou 0 se não houver saldo).
    """
    income = 0.0
    expenses = 0.0
    has_income = False
    has_expense = False
    for t in transactions:
        if t.type == "income":
            income += float(t.amount or 0.0)
            has_income = True
        elif t.type == "expense":
            expenses += float(t.amount or 0.0)
            has_expense = True

    if not has_income:
        income = float(balance.total_income or 0.0) if balance else 0.0
    if not has_expense:
        expenses = float(balance.total_expenses or 0.0) if balance else 0.0
    return income, expenses


def calculate_and_save_projections(
    repository,
    user_id: int,
    current_assets: float,
    current_liabilities: float,
    monthly_income: float,
    monthly_expenses: float,
    monthly_savings: float | None = None,
    *,
    params: ProjectionParams | None = None,
    today: date | None = None,
) -> ProjectionResult:
    start_year = (today or date.today()).year
    projections = simulate_projection(
        current_assets=current_assets,
        current_liabilities=current_liabilities,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_savings=monthly_savings,
        start_year=start_year,
        params=params,
    )

    try:
        repository.replace_projections(user_id, projections)
    except ProjectionError as exc:
        logger.warning("Projecao: falha ao salvar serie do usuario %s", user_id, exc_info=True)
        return ProjectionResult(success=False, error=exc)

    logger.info(
        "Projecao: %s anos salvos para o usuario %s (patrimonio final %.2f)",
        len(projections),
        user_id,
        projections[-1].net_worth if projections else 0.0,
    )
    return ProjectionResult(success=True, projections=projections)


def recalculate_user_projections(
    repository,
    user_id: int,
    *,
    params: ProjectionParams | None = None,
    today: date | None = None,
    sample_days: int = DEFAULT_SAMPLE_DAYS,
) -> ProjectionResult:
    today = today or date.today()
    since = today - timedelta(days=int(sample_days))

    # Qualquer falha de leitura aborta antes de gravar
    try:
        total_assets = repository.fetch_total_assets(user_id)
        total_liabilities = repository.fetch_total_liabilities(user_id)
        recent = repository.fetch_transactions_since(user_id, since)
        balance = repository.fetch_account_balance(user_id)
    except ProjectionError as exc:
        logger.warning("Projecao: falha ao ler dados do usuario %s", user_id, exc_info=True)
        return ProjectionResult(success=False, error=exc)

    monthly_income, monthly_expenses = derive_monthly_cashflow(recent, balance)

    return calculate_and_save_projections(
        repository,
        user_id,
        current_assets=total_assets,
        current_liabilities=total_liabilities,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        params=params,
        today=today,
    )


def initialize_user_projections(
    repository,
    user_id: int,
    *,
    params: ProjectionParams | None = None,
    today: date | None = None,
    sample_days: int = DEFAULT_SAMPLE_DAYS,
) -> ProjectionResult:
    """Inicializa conta nova: saldo zerado + primeira série de projeção."""
    try:
        repository.ensure_account_balance(user_id)
    except ProjectionError as exc:
        logger.warning("Projecao: falha ao criar saldo do usuario %s", user_id, exc_info=True)
        return ProjectionResult(success=False, error=exc)

    return recalculate_user_projections(
        repository,
        user_id,
        params=params,
        today=today,
        sample_days=sample_days,
    )


def summarize_net_worth(repository, user_id: int) -> dict[str, float]:
    """Foto atual do patrimônio. Propaga ProjectionError em falha de leitura."""
    total_assets = float(repository.fetch_total_assets(user_id))
    total_liabilities = float(repository.fetch_total_liabilities(user_id))
    balance = repository.fetch_account_balance(user_id)

    return {
        "total_assets": round(total_assets, 2),
        "total_liabilities": round(total_liabilities, 2),
        "net_worth": round(total_assets - total_liabilities, 2),
        "current_balance": round(float(balance.current_balance or 0.0), 2) if balance else 0.0,
        "total_income": round(float(balance.total_income or 0.0), 2) if balance else 0.0,
        "total_expenses": round(float(balance.total_expenses or 0.0), 2) if balance else 0.0,
    }
