"""
Shared fixtures: a fresh app against a throwaway SQLite file per test.
"""

from datetime import date

import pytest
from flask_jwt_extended import create_access_token

from studyenergy import create_app, db
from studyenergy.models import User


TODAY = date(2026, 3, 10)


@pytest.fixture
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'studyenergy-test.db'}",
            "JWT_SECRET_KEY": "test-jwt-secret-key-that-is-long-enough",
            # worker threads share the pool; writers wait on the SQLite lock
            "SQLALCHEMY_ENGINE_OPTIONS": {"connect_args": {"check_same_thread": False, "timeout": 15}},
        }
    )
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(username="ada", password="secret"):
        user = User()
        user.set_username(username)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id))
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
