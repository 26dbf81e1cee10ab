from __future__ import annotations

from datetime import datetime

from models.extensions import db


class Liability(db.Model):
    __tablename__ = "liabilities"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(140), nullable=False)
    total_amount = db.Column(db.Float, nullable=False, default=0.0)
    # Saldo devedor restante. NULL quando não é acompanhado (usa total_amount).
    outstanding_amount = db.Column(db.Float, nullable=True)
    interest_rate = db.Column(db.Float, nullable=True)
    due_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
