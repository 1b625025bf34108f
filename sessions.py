"""Session store + public session APIs.

Routes:
- POST /api/session                 create or resume a session
- GET  /api/session/status          cooldown / daily limit / streak status
- GET  /api/leaderboard             top sessions by coins
"""

from __future__ import annotations

import os
import random
import uuid

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import select

import economy
from errors import MissingFields, SessionNotFound
from extensions import db
from models_sessions import GameSession

LEADERBOARD_SIZE = int(os.getenv("LEADERBOARD_SIZE", "10"))
USERNAME_MAX_LEN = 40

sessions_api = Blueprint("sessions_api", __name__)


def request_field(data: dict, *names: str) -> str:
    """First non-empty value among camelCase/snake_case aliases."""
    for name in names:
        value = data.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _default_username() -> str:
    return f"User{random.randint(1000, 90999)}"


def get_session(db_session, session_id: str, for_update: bool = False) -> GameSession:
    stmt = select(GameSession).where(GameSession.session_id == session_id)
    if for_update:
        # Re-read inside the transaction even if the row is already in the identity map.
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    gs = db_session.execute(stmt).scalar_one_or_none()
    if gs is None:
        raise SessionNotFound()
    return gs


def create_or_resume_session(db_session, session_id: str | None = None, username: str | None = None) -> GameSession:
    if session_id:
        gs = db_session.get(GameSession, session_id)
        if gs is not None:
            return gs

    username = (username or "").strip()[:USERNAME_MAX_LEN] or _default_username()
    gs = GameSession(
        session_id=str(uuid.uuid4()),
        username=username,
        coins=0,
        daily_count=0,
        daily_date=None,
        last_ad_time=0,
        streak_count=0,
        last_claim_date=None,
    )
    db_session.add(gs)
    db_session.commit()
    current_app.logger.info("Session created %s (%s)", gs.session_id, gs.username)
    return gs


def leaderboard(db_session, limit: int = LEADERBOARD_SIZE) -> list[dict]:
    rows = db_session.execute(
        select(GameSession.username, GameSession.coins)
        .order_by(GameSession.coins.desc(), GameSession.created_at.asc())
        .limit(limit)
    ).all()
    return [{"username": r.username, "coins": r.coins} for r in rows]


def session_status(db_session, session_id: str, now: int | None = None) -> dict:
    now = now if now is not None else economy.now_ms()
    gs = get_session(db_session, session_id)
    today = economy.utc_day(now)

    daily_count = economy.effective_daily_count(gs.daily_count, gs.daily_date, today)
    wait = economy.cooldown_wait_seconds(gs.last_ad_time, now)

    reasons = []
    if daily_count >= economy.DAILY_LIMIT:
        reasons.append("daily_limit")
    if wait > 0:
        reasons.append("cooldown")

    return {
        "sessionId": gs.session_id,
        "coins": gs.coins,
        "canWatch": not reasons,
        "reasons": reasons,
        "secondsRemaining": wait,
        "dailyCount": daily_count,
        "dailyLimit": economy.DAILY_LIMIT,
        "coinPerAd": economy.COIN_PER_AD,
        "minPlaySeconds": economy.AD_MIN_PLAY_MS / 1000,
        "streakCount": gs.streak_count,
        "canClaimStreak": gs.last_claim_date is None or gs.last_claim_date < today,
    }


@sessions_api.post("/api/session")
def api_session():
    data = request.get_json(silent=True) or {}
    gs = create_or_resume_session(
        db.session,
        session_id=request_field(data, "sessionId", "session_id"),
        username=request_field(data, "username"),
    )
    return jsonify({"success": True, "session": gs.to_dict()})


@sessions_api.get("/api/session/status")
def api_session_status():
    session_id = request_field(request.args, "sessionId", "session_id")
    if not session_id:
        raise MissingFields("Missing sessionId")
    return jsonify({"success": True, **session_status(db.session, session_id)})


@sessions_api.get("/api/leaderboard")
def api_leaderboard():
    return jsonify({"success": True, "leaderboard": leaderboard(db.session)})
