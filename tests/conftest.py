"""Shared fixtures: isolated SQLite file, fixed catalog, controllable clock."""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="coinstorm-tests-")

# Must be set before `app` is imported: configuration is read at import time.
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["RATELIMIT_ENABLED"] = "0"
os.environ["REWARDS_CATALOG_PATH"] = os.path.join(os.path.dirname(__file__), "data", "rewards.json")
os.environ["ADMIN_REWARDS_KEY"] = "test-admin-key"
for _var in (
    "COIN_PER_AD",
    "AD_COOLDOWN_MS",
    "AD_MIN_PLAY_MS",
    "AD_DAILY_LIMIT",
    "AD_TOKEN_TTL_SECONDS",
    "LEADERBOARD_SIZE",
    "RENDER",
    "FLASK_ENV",
):
    os.environ.pop(_var, None)

import pytest

import economy
from app import app as flask_app
from extensions import db
from helpers import T0, FakeClock
from models_sessions import GameSession


@pytest.fixture
def app():
    flask_app.testing = True
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def clock(monkeypatch):
    """Pin economy.now_ms() so routes and services see the same controlled time."""
    fake = FakeClock(T0)
    monkeypatch.setattr(economy, "now_ms", fake)
    return fake


@pytest.fixture
def make_session(app):
    """Insert a session row with explicit field values; returns its id."""
    counter = {"n": 0}

    def _make(**fields) -> str:
        counter["n"] += 1
        values = {
            "session_id": f"00000000-0000-4000-8000-{counter['n']:012d}",
            "username": f"player{counter['n']}",
            "coins": 0,
            "daily_count": 0,
            "daily_date": None,
            "last_ad_time": 0,
            "streak_count": 0,
            "last_claim_date": None,
        }
        values.update(fields)
        db.session.add(GameSession(**values))
        db.session.commit()
        return values["session_id"]

    return _make
