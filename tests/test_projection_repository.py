from datetime import date, timedelta

import pytest

from models.account_balance_model import AccountBalance
from models.asset_model import Asset
from sqlalchemy import text

from models.extensions import db
from models.liability_model import Liability
from models.projection_model import Projection
from models.transaction_model import Transaction
from services.projection_engine import FETCH, PERSIST, ProjectionError, ProjectionYear, simulate_projection
from services.projection_repository import BalanceSnapshot, SqlAlchemyProjectionRepository

TODAY = date(2026, 10, 19)


def _series(assets=1000.0, start_year=2026):
    return simulate_projection(
        current_assets=assets,
        current_liabilities=500.0,
        monthly_income=100.0,
        monthly_expenses=50.0,
        start_year=start_year,
    )


def test_totals_use_outstanding_amount_when_present(app, user_id):
    with app.app_context():
        db.session.add_all(
            [
                Asset(user_id=user_id, name="Acoes", value=1000.0),
                Asset(user_id=user_id, name="Ouro", value=250.5),
                Liability(user_id=user_id, name="Carro", total_amount=900.0, outstanding_amount=300.0),
                Liability(user_id=user_id, name="Cartao", total_amount=200.0),
            ]
        )
        db.session.commit()

        repo = SqlAlchemyProjectionRepository(db.session)
        assert repo.fetch_total_assets(user_id) == pytest.approx(1250.5)
        assert repo.fetch_total_liabilities(user_id) == pytest.approx(500.0)


def test_totals_are_zero_without_rows(app, user_id):
    with app.app_context():
        repo = SqlAlchemyProjectionRepository()
        assert repo.fetch_total_assets(user_id) == 0.0
        assert repo.fetch_total_liabilities(user_id) == 0.0
        assert repo.fetch_account_balance(user_id) is None


def test_transactions_since_filters_window(app, user_id):
    with app.app_context():
        db.session.add_all(
            [
                Transaction(user_id=user_id, type="income", amount=10.0, date=TODAY - timedelta(days=40)),
                Transaction(user_id=user_id, type="income", amount=20.0, date=TODAY - timedelta(days=30)),
                Transaction(user_id=user_id, type="expense", amount=5.0, date=TODAY),
            ]
        )
        db.session.commit()

        repo = SqlAlchemyProjectionRepository()
        rows = repo.fetch_transactions_since(user_id, TODAY - timedelta(days=30))

    assert [(t.type, t.amount) for t in rows] == [("income", 20.0), ("expense", 5.0)]


def test_ensure_account_balance_is_idempotent(app, user_id):
    with app.app_context():
        repo = SqlAlchemyProjectionRepository()
        assert repo.ensure_account_balance(user_id) == BalanceSnapshot()

        bal = db.session.get(AccountBalance, user_id)
        bal.total_income = 700.0
        db.session.commit()

        assert repo.ensure_account_balance(user_id).total_income == 700.0
        assert db.session.query(AccountBalance).count() == 1


def test_replace_projections_keeps_exactly_one_series(app, user_id):
    with app.app_context():
        repo = SqlAlchemyProjectionRepository()
        repo.replace_projections(user_id, _series(assets=1000.0))
        repo.replace_projections(user_id, _series(assets=2000.0))

        assert db.session.query(Projection).filter_by(user_id=user_id).count() == 10
        stored = repo.list_projections(user_id)
        assert [p.year_number for p in stored] == list(range(1, 11))
        assert stored == _series(assets=2000.0)

        row = db.session.query(Projection).filter_by(user_id=user_id, year_number=1).one()
        assert row.investment_corpus == row.assets_value


def test_failed_insert_keeps_previous_series(app, user_id):
    with app.app_context():
        repo = SqlAlchemyProjectionRepository()
        previous = _series()
        repo.replace_projections(user_id, previous)

        duplicated = [
            ProjectionYear(2026, 1, 1.0, 0.0, 1.0),
            ProjectionYear(2027, 1, 2.0, 0.0, 2.0),
        ]
        with pytest.raises(ProjectionError) as excinfo:
            repo.replace_projections(user_id, duplicated)

        assert excinfo.value.kind == PERSIST
        assert repo.list_projections(user_id) == previous


def test_replace_does_not_touch_other_users(app, user_id):
    from models.user_model import User

    with app.app_context():
        other = User(username="bob", email="bob@example.test")
        db.session.add(other)
        db.session.commit()

        repo = SqlAlchemyProjectionRepository()
        repo.replace_projections(other.id, _series())
        repo.replace_projections(user_id, _series(assets=5.0))

        assert len(repo.list_projections(other.id)) == 10
        assert repo.list_projections(other.id) == _series()


def test_database_error_on_read_is_reported_as_fetch(app, user_id):
    with app.app_context():
        db.session.add(Liability(user_id=user_id, name="Carro", total_amount=900.0))
        db.session.commit()
        db.session.execute(text("DROP TABLE assets"))
        db.session.commit()

        repo = SqlAlchemyProjectionRepository()
        with pytest.raises(ProjectionError) as excinfo:
            repo.fetch_total_assets(user_id)

        assert excinfo.value.kind == FETCH
        assert excinfo.value.code == "projection_fetch_failed"
        # a sessão volta utilizável depois do rollback
        assert repo.fetch_total_liabilities(user_id) == pytest.approx(900.0)


def test_ensure_account_balance_read_error_is_fetch(app, user_id):
    with app.app_context():
        db.session.execute(text("DROP TABLE account_balance"))
        db.session.commit()

        repo = SqlAlchemyProjectionRepository()
        with pytest.raises(ProjectionError) as excinfo:
            repo.ensure_account_balance(user_id)

        assert excinfo.value.kind == FETCH
