import pytest

from app import create_app
from config import Config
from models.extensions import db
from models.user_model import User
from services.projection_repository import InMemoryProjectionRepository


@pytest.fixture()
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret-key-please-change-32chars+"
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'test.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"check_same_thread": False}}

    app = create_app(TestConfig)
    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def user_id(app):
    with app.app_context():
        user = User(username="alice", email="alice@example.test")
        db.session.add(user)
        db.session.commit()
        return user.id


@pytest.fixture()
def auth_client(client, user_id):
    with client.session_transaction() as sess:
        sess["_user_id"] = str(user_id)
        sess["_fresh"] = True
    return client


@pytest.fixture()
def repo():
    return InMemoryProjectionRepository()
