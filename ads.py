"""Ad-watch reward flow.

Routes:
- POST /api/startAd   issue a single-use ad token
- POST /api/reward    settle a token into coins

The start-ad checks only spare the player an ad that would be rejected. The
settlement re-validates everything against the locked session row, because the
session can change (another tab, another token) while the ad is playing.
"""

from __future__ import annotations

import secrets

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import text

import economy
from errors import AdNotPlayedLongEnough, Cooldown, DailyLimit, InvalidToken, MissingFields
from extensions import db, limiter
from models_ads import AdToken
from sessions import get_session, request_field
from storage import run_atomic

ads_api = Blueprint("ads_api", __name__)


def _check_can_reward(gs, now: int) -> int:
    """Raise if the session may not earn an ad reward now; return today's effective count."""
    wait = economy.cooldown_wait_seconds(gs.last_ad_time, now)
    if wait > 0:
        raise Cooldown(wait)
    daily_count = economy.effective_daily_count(gs.daily_count, gs.daily_date, economy.utc_day(now))
    if daily_count >= economy.DAILY_LIMIT:
        raise DailyLimit()
    return daily_count


def issue_token(db_session, session_id: str, now: int | None = None) -> AdToken:
    now = now if now is not None else economy.now_ms()
    gs = get_session(db_session, session_id)
    _check_can_reward(gs, now)

    ad_token = AdToken(token=secrets.token_urlsafe(24), session_id=session_id, created_at=now)
    db_session.add(ad_token)
    db_session.commit()
    return ad_token


def settle_reward(db_session, session_id: str, token: str, now: int | None = None) -> dict:
    now = now if now is not None else economy.now_ms()

    def _settle():
        ad_token = db_session.get(AdToken, token, populate_existing=True)
        if ad_token is None or ad_token.session_id != session_id:
            raise InvalidToken()
        if economy.token_expired(ad_token.created_at, now):
            raise InvalidToken("Token expired")
        if now - ad_token.created_at < economy.AD_MIN_PLAY_MS:
            raise AdNotPlayedLongEnough()

        # Consume the token before touching the session row: a concurrent settlement
        # of the same token blocks here and then sees 0 rows. Later rejections roll
        # the delete back.
        res = db_session.execute(
            text("DELETE FROM ad_tokens WHERE token = :t AND session_id = :s"),
            {"t": token, "s": session_id},
        )
        if res.rowcount != 1:
            raise InvalidToken()
        db_session.expunge(ad_token)

        gs = get_session(db_session, session_id, for_update=True)
        daily_count = _check_can_reward(gs, now) + 1
        bonus = economy.milestone_bonus(daily_count)

        gs.coins = gs.coins + economy.COIN_PER_AD + bonus
        gs.daily_count = daily_count
        gs.daily_date = economy.utc_day(now)
        gs.last_ad_time = now
        # Version check on the session row happens here.
        db_session.flush()
        return {"coins": gs.coins, "dailyCount": gs.daily_count, "bonus": bonus}

    result = run_atomic(db_session, _settle)
    current_app.logger.info(
        "Ad reward settled session=%s daily=%s bonus=%s", session_id, result["dailyCount"], result["bonus"]
    )
    return result


def purge_expired_tokens(db_session, now: int) -> int:
    res = db_session.execute(
        text("DELETE FROM ad_tokens WHERE created_at < :cutoff"),
        {"cutoff": now - economy.AD_TOKEN_TTL_MS},
    )
    db_session.commit()
    return res.rowcount


@ads_api.post("/api/startAd")
@limiter.limit("20 per minute")
def api_start_ad():
    data = request.get_json(silent=True) or {}
    session_id = request_field(data, "sessionId", "session_id")
    if not session_id:
        raise MissingFields("Missing sessionId")

    ad_token = issue_token(db.session, session_id)
    return jsonify({"success": True, **ad_token.to_dict()})


@ads_api.post("/api/reward")
@limiter.limit("20 per minute")
def api_reward():
    data = request.get_json(silent=True) or {}
    session_id = request_field(data, "sessionId", "session_id")
    token = request_field(data, "token")
    if not session_id or not token:
        raise MissingFields()

    return jsonify({"success": True, **settle_reward(db.session, session_id, token)})
