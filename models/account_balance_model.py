from __future__ import annotations

from datetime import datetime

from models.extensions import db


class AccountBalance(db.Model):
    __tablename__ = "account_balance"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)

    current_balance = db.Column(db.Float, nullable=False, default=0.0)
    # Totais acumulados (fallback da projeção quando não há transações recentes)
    total_income = db.Column(db.Float, nullable=False, default=0.0)
    total_expenses = db.Column(db.Float, nullable=False, default=0.0)

    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
