from models.extensions import db

__all__ = ["db"]
