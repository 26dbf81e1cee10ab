import os
import sys
import tempfile
from datetime import date, timedelta


def _setup_env():
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if root not in sys.path:
        sys.path.insert(0, root)
    tmpdir = tempfile.mkdtemp(prefix="projection_smoke_")
    db_path = os.path.join(tmpdir, "projection_test.db")
    os.environ.setdefault("DATABASE_URL", f"sqlite:///{db_path}")
    os.environ.setdefault("SECRET_KEY", "test-secret-key-please-change-32chars+")


def main():
    _setup_env()

    from app import create_app
    from models.account_balance_model import AccountBalance
    from models.asset_model import Asset
    from models.extensions import db
    from models.liability_model import Liability
    from models.projection_model import Projection
    from models.transaction_model import Transaction
    from models.user_model import User

    app = create_app()

    results = []

    def check(label, condition):
        if not condition:
            raise AssertionError(label)
        results.append(label)

    with app.app_context():
        user = User(username="alice", email="alice@example.test")
        db.session.add(user)
        db.session.commit()
        user_id = user.id

        db.session.add(AccountBalance(user_id=user_id, total_income=0.0, total_expenses=0.0))
        db.session.add(Asset(user_id=user_id, name="Carteira", value=100000.0))
        db.session.add(Liability(user_id=user_id, name="Financiamento", total_amount=250000.0, outstanding_amount=200000.0))
        today = date.today()
        db.session.add(Transaction(user_id=user_id, type="income", amount=50000.0, date=today - timedelta(days=3)))
        db.session.add(Transaction(user_id=user_id, type="expense", amount=30000.0, date=today - timedelta(days=2)))
        db.session.commit()

    client = app.test_client()

    resp = client.post("/api/projections/recalculate")
    check("anonymous_blocked", resp.status_code == 401)

    with client.session_transaction() as sess:
        sess["_user_id"] = str(user_id)
        sess["_fresh"] = True

    for _ in range(2):
        resp = client.post("/api/projections/recalculate")
        check("recalculate_ok", resp.status_code == 200)

    data = resp.get_json() or {}
    first = (data.get("projections") or [{}])[0]
    check("year1_assets", first.get("assets_value") == 352000.0)
    check("year1_liabilities", first.get("liabilities_value") == 180000.0)
    check("year1_net_worth", first.get("net_worth") == 172000.0)

    with app.app_context():
        rows = db.session.query(Projection).filter_by(user_id=user_id).count()
        check("ten_rows_after_two_runs", rows == 10)

    resp = client.get("/api/net-worth")
    check("net_worth_snapshot", (resp.get_json() or {}).get("net_worth") == -100000.0)

    print("OK - projection smoke tests passed:")
    for item in results:
        print(f"- {item}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
