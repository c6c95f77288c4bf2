from __future__ import annotations

import os
import sys

import pytest

from app import create_app, db
from app.models import Customer

# Ensure the app package is importable when tests change directories
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, BASE_DIR)


@pytest.fixture
def app(tmp_path, monkeypatch):
    os.environ.setdefault("SECRET_KEY", "testsecret")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("POSTGRES_URL", raising=False)
    # Ensure a clean database for each test within the temp directory
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path))

    app = create_app(
        ["--demo"],
        {
            "TESTING": True,
            "WTF_CSRF_ENABLED": False,
            "CACHE_TYPE": "SimpleCache",
        },
    )

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def customers(app):
    """Create two customers and return their ids keyed by short name."""
    with app.app_context():
        evil = Customer(name="Evil Rabbit", email="evil@rabbit.com")
        amy = Customer(name="Amy Burns", email="amy@burns.com")
        db.session.add_all([evil, amy])
        db.session.commit()
        return {"evil": evil.id, "amy": amy.id}
