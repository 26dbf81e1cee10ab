from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from models.account_balance_model import AccountBalance
from models.asset_model import Asset
from models.extensions import db
from models.liability_model import Liability
from models.projection_model import Projection
from models.transaction_model import Transaction
from services.projection_engine import FETCH, PERSIST, ProjectionError, ProjectionYear


@dataclass(frozen=True)
class TransactionSample:
    type: str  # income | expense
    amount: float
    date: date


@dataclass(frozen=True)
class BalanceSnapshot:
    current_balance: float = 0.0
    total_income: float = 0.0
    total_expenses: float = 0.0


class ProjectionRepository:
    """Interface de acesso a dados usada pelo motor de projeção.

    Erros de leitura/gravação devem sair como ProjectionError.
    """

    def fetch_total_assets(self, user_id: int) -> float:
        raise NotImplementedError

    def fetch_total_liabilities(self, user_id: int) -> float:
        raise NotImplementedError

    def fetch_transactions_since(self, user_id: int, since: date) -> list[TransactionSample]:
        raise NotImplementedError

    def fetch_account_balance(self, user_id: int) -> BalanceSnapshot | None:
        raise NotImplementedError

    def ensure_account_balance(self, user_id: int) -> BalanceSnapshot:
        raise NotImplementedError

    def replace_projections(self, user_id: int, rows: Iterable[ProjectionYear]) -> None:
        """Substitui toda a série do usuário de forma atômica."""
        raise NotImplementedError

    def list_projections(self, user_id: int) -> list[ProjectionYear]:
        raise NotImplementedError


def _snapshot(bal: AccountBalance) -> BalanceSnapshot:
    return BalanceSnapshot(
        current_balance=float(bal.current_balance or 0.0),
        total_income=float(bal.total_income or 0.0),
        total_expenses=float(bal.total_expenses or 0.0),
    )


class SqlAlchemyProjectionRepository(ProjectionRepository):
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def _fetch_failed(self, what: str, user_id: int) -> ProjectionError:
        # Libera a sessão para o próximo uso
        self.session.rollback()
        return ProjectionError(FETCH, f"Falha ao buscar {what} do usuario {user_id}.")

    def fetch_total_assets(self, user_id: int) -> float:
        try:
            total = (
                self.session.query(func.coalesce(func.sum(Asset.value), 0.0))
                .filter(Asset.user_id == user_id)
                .scalar()
            )
        except SQLAlchemyError as exc:
            raise self._fetch_failed("ativos", user_id) from exc
        return float(total or 0.0)

    def fetch_total_liabilities(self, user_id: int) -> float:
        # outstanding_amount tem precedência quando preenchido
        amount = func.coalesce(Liability.outstanding_amount, Liability.total_amount, 0.0)
        try:
            total = (
                self.session.query(func.coalesce(func.sum(amount), 0.0))
                .filter(Liability.user_id == user_id)
                .scalar()
            )
        except SQLAlchemyError as exc:
            raise self._fetch_failed("dividas", user_id) from exc
        return float(total or 0.0)

    def fetch_transactions_since(self, user_id: int, since: date) -> list[TransactionSample]:
        try:
            rows = (
                self.session.query(Transaction.type, Transaction.amount, Transaction.date)
                .filter(
                    Transaction.user_id == user_id,
                    Transaction.date >= since,
                    Transaction.type.in_(("income", "expense")),
                )
                .order_by(Transaction.date.asc(), Transaction.id.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise self._fetch_failed("transacoes", user_id) from exc
        return [TransactionSample(type=r.type, amount=float(r.amount or 0.0), date=r.date) for r in rows]

    def fetch_account_balance(self, user_id: int) -> BalanceSnapshot | None:
        try:
            bal = self.session.get(AccountBalance, user_id)
        except SQLAlchemyError as exc:
            raise self._fetch_failed("saldo", user_id) from exc
        if not bal:
            return None
        return _snapshot(bal)

    def ensure_account_balance(self, user_id: int) -> BalanceSnapshot:
        try:
            bal = self.session.get(AccountBalance, user_id)
        except SQLAlchemyError as exc:
            raise self._fetch_failed("saldo", user_id) from exc
        if bal:
            return _snapshot(bal)

        bal = AccountBalance(
            user_id=user_id,
            current_balance=0.0,
            total_income=0.0,
            total_expenses=0.0,
        )
        try:
            self.session.add(bal)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise ProjectionError(PERSIST, f"Falha ao criar saldo do usuario {user_id}.") from exc
        return _snapshot(bal)

    def replace_projections(self, user_id: int, rows: Iterable[ProjectionYear]) -> None:
        # delete + insert na mesma transação: ou troca tudo ou mantém a série anterior
        try:
            self.session.query(Projection).filter(Projection.user_id == user_id).delete()
            self.session.add_all(
                [
                    Projection(
                        user_id=user_id,
                        year=p.year,
                        year_number=p.year_number,
                        investment_corpus=p.projected_assets,
                        assets_value=p.projected_assets,
                        liabilities_value=p.projected_liabilities,
                        net_worth=p.net_worth,
                    )
                    for p in rows
                ]
            )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise ProjectionError(PERSIST, f"Falha ao salvar projecao do usuario {user_id}.") from exc

    def list_projections(self, user_id: int) -> list[ProjectionYear]:
        try:
            rows = (
                self.session.query(Projection)
                .filter(Projection.user_id == user_id)
                .order_by(Projection.year_number.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise self._fetch_failed("projecoes", user_id) from exc
        return [
            ProjectionYear(
                year=r.year,
                year_number=r.year_number,
                projected_assets=float(r.assets_value or 0.0),
                projected_liabilities=float(r.liabilities_value or 0.0),
                net_worth=float(r.net_worth or 0.0),
            )
            for r in rows
        ]


class InMemoryProjectionRepository(ProjectionRepository):
    """Repositório em memória (testes e simulações sem banco)."""

    def __init__(self):
        self.assets: dict[int, list[float]] = {}
        # (total_amount, outstanding_amount)
        self.liabilities: dict[int, list[tuple[float, float | None]]] = {}
        self.transactions: dict[int, list[TransactionSample]] = {}
        self.balances: dict[int, BalanceSnapshot] = {}
        self.projections: dict[int, list[ProjectionYear]] = {}

    def add_asset(self, user_id: int, value: float) -> None:
        self.assets.setdefault(user_id, []).append(float(value))

    def add_liability(self, user_id: int, total_amount: float, outstanding_amount: float | None = None) -> None:
        self.liabilities.setdefault(user_id, []).append((float(total_amount), outstanding_amount))

    def add_transaction(self, user_id: int, kind: str, amount: float, on: date) -> None:
        self.transactions.setdefault(user_id, []).append(TransactionSample(type=kind, amount=float(amount), date=on))

    def set_balance(self, user_id: int, *, total_income: float = 0.0, total_expenses: float = 0.0, current_balance: float = 0.0) -> None:
        self.balances[user_id] = BalanceSnapshot(
            current_balance=float(current_balance),
            total_income=float(total_income),
            total_expenses=float(total_expenses),
        )

    def fetch_total_assets(self, user_id: int) -> float:
        return sum(self.assets.get(user_id, []), 0.0)

    def fetch_total_liabilities(self, user_id: int) -> float:
        return sum(
            (
                outstanding if outstanding is not None else total
                for total, outstanding in self.liabilities.get(user_id, [])
            ),
            0.0,
        )

    def fetch_transactions_since(self, user_id: int, since: date) -> list[TransactionSample]:
        return [t for t in self.transactions.get(user_id, []) if t.date >= since]

    def fetch_account_balance(self, user_id: int) -> BalanceSnapshot | None:
        return self.balances.get(user_id)

    def ensure_account_balance(self, user_id: int) -> BalanceSnapshot:
        return self.balances.setdefault(user_id, BalanceSnapshot())

    def replace_projections(self, user_id: int, rows: Iterable[ProjectionYear]) -> None:
        self.projections[user_id] = list(rows)

    def list_projections(self, user_id: int) -> list[ProjectionYear]:
        return sorted(self.projections.get(user_id, []), key=lambda p: p.year_number)
