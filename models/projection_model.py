from __future__ import annotations

from datetime import datetime

from models.extensions import db


class Projection(db.Model):
    __tablename__ = "projections"
    __table_args__ = (
        db.UniqueConstraint("user_id", "year_number", name="uq_projections_user_year_number"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    year = db.Column(db.Integer, nullable=False)
    year_number = db.Column(db.Integer, nullable=False)  # 1..10

    # investment_corpus e assets_value guardam o mesmo valor (o gráfico lê o corpus)
    investment_corpus = db.Column(db.Float, nullable=False, default=0.0)
    assets_value = db.Column(db.Float, nullable=False, default=0.0)
    liabilities_value = db.Column(db.Float, nullable=False, default=0.0)
    net_worth = db.Column(db.Float, nullable=False, default=0.0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
