from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from models.extensions import db


class Transaction(db.Model):
    __tablename__ = "transactions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    type = db.Column(db.String(20), nullable=False)  # income | expense
    amount = db.Column(db.Float, nullable=False)
    category = db.Column(db.String(32), nullable=False, default="other")
    description = db.Column(db.String(255), nullable=True)
    date = db.Column(db.Date, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


def _column_exists(conn, table: str, column: str) -> bool:
    rows = conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()
    return any(r.get("name") == column for r in rows)


def _migrate_sqlite_schema(conn) -> None:
    """Migração leve para SQLite sem Alembic.

    Bancos antigos não tinham investment_corpus nem outstanding_amount.
    """
    if not _column_exists(conn, "projections", "investment_corpus"):
        conn.execute(text("ALTER TABLE projections ADD COLUMN investment_corpus FLOAT"))
        conn.execute(
            text("UPDATE projections SET investment_corpus = COALESCE(investment_corpus, assets_value)")
        )

    if not _column_exists(conn, "liabilities", "outstanding_amount"):
        conn.execute(text("ALTER TABLE liabilities ADD COLUMN outstanding_amount FLOAT"))


def _column_exists_postgres(conn, table: str, column: str) -> bool:
    rows = conn.execute(
        text(
            """
            SELECT 1
              FROM information_schema.columns
             WHERE table_schema = 'public'
               AND table_name = :table
               AND column_name = :column
             LIMIT 1
            """
        ),
        {"table": table, "column": column},
    ).fetchall()
    return len(rows) > 0


def _migrate_postgres_schema(conn) -> None:
    """Migração leve para Postgres sem Alembic."""
    if not _column_exists_postgres(conn, "projections", "investment_corpus"):
        conn.execute(
            text("ALTER TABLE public.projections ADD COLUMN IF NOT EXISTS investment_corpus DOUBLE PRECISION")
        )
        conn.execute(
            text("UPDATE public.projections SET investment_corpus = COALESCE(investment_corpus, assets_value)")
        )

    if not _column_exists_postgres(conn, "liabilities", "outstanding_amount"):
        conn.execute(
            text("ALTER TABLE public.liabilities ADD COLUMN IF NOT EXISTS outstanding_amount DOUBLE PRECISION")
        )


def init_db(app):
    db.init_app(app)
    with app.app_context():
        # Garante que todas as tabelas entram no metadata antes do create_all
        from models.account_balance_model import AccountBalance  # noqa: F401
        from models.asset_model import Asset  # noqa: F401
        from models.liability_model import Liability  # noqa: F401
        from models.projection_model import Projection  # noqa: F401
        from models.user_model import User  # noqa: F401

        db.create_all()

        engine_name = db.engine.name
        with db.engine.begin() as conn:
            if engine_name == "sqlite":
                conn.execute(text("PRAGMA busy_timeout=5000"))
                _migrate_sqlite_schema(conn)
            elif engine_name in {"postgresql", "postgres"}:
                _migrate_postgres_schema(conn)
