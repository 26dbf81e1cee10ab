from datetime import datetime

from flask_login import UserMixin

from models.extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    assets = db.relationship("Asset", backref="user", lazy=True, cascade="all, delete-orphan")
    liabilities = db.relationship("Liability", backref="user", lazy=True, cascade="all, delete-orphan")
    transactions = db.relationship("Transaction", backref="user", lazy=True, cascade="all, delete-orphan")

    # Saldo consolidado 1:1
    balance = db.relationship(
        "AccountBalance",
        uselist=False,
        backref="user",
        cascade="all, delete-orphan",
    )

    projections = db.relationship(
        "Projection",
        backref="user",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="Projection.year_number",
    )
