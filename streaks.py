"""Daily streak bonus.

Routes:
- POST /api/streak/claim

Days are UTC calendar dates. Claiming on consecutive days grows the streak;
missing a day resets it to 1. One claim per UTC day.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

import economy
from errors import MissingFields
from extensions import db, limiter
from sessions import get_session, request_field
from storage import run_atomic

streaks_api = Blueprint("streaks_api", __name__)


def claim_daily_streak(db_session, session_id: str, now: int | None = None) -> dict:
    now = now if now is not None else economy.now_ms()
    today = economy.utc_day(now)

    def _claim():
        gs = get_session(db_session, session_id, for_update=True)
        streak = economy.next_streak(gs.last_claim_date, gs.streak_count, today)
        bonus = economy.streak_bonus(streak)

        gs.streak_count = streak
        gs.last_claim_date = today
        gs.coins = gs.coins + bonus
        db_session.flush()
        return {"streakCount": streak, "bonus": bonus, "coins": gs.coins}

    result = run_atomic(db_session, _claim)
    current_app.logger.info("Streak claimed session=%s streak=%s bonus=%s", session_id, result["streakCount"], result["bonus"])
    return result


@streaks_api.post("/api/streak/claim")
@limiter.limit("10 per minute")
def api_claim_streak():
    data = request.get_json(silent=True) or {}
    session_id = request_field(data, "sessionId", "session_id")
    if not session_id:
        raise MissingFields("Missing sessionId")
    return jsonify({"success": True, **claim_daily_streak(db.session, session_id)})
