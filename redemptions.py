"""Coin redemption + ledger.

Routes:
- GET  /api/rewards
- POST /api/redeem

The redemption code is generated inside the same transaction that debits the
coins and inserts the ledger row; what the player sees is exactly what the
ledger holds.
"""

from __future__ import annotations

import os
import secrets
import string

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from errors import InvalidReward, MissingFields, NotEnoughCoins
from extensions import db, limiter
from models_redemptions import ADMIN_SESSION_ID, Redemption
from sessions import get_session, request_field
from storage import run_atomic

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SUFFIX_LEN = 8
ADMIN_MINT_MAX = int(os.getenv("ADMIN_MINT_MAX", "100"))

redemptions_api = Blueprint("redemptions_api", __name__)


def generate_code(reward_id: str) -> str:
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SUFFIX_LEN))
    return f"{reward_id.upper()}-{suffix}"


def _lookup(catalog: dict, reward_id: str) -> dict:
    reward = catalog.get(reward_id)
    if reward is None:
        raise InvalidReward()
    return reward


def _append(db_session, session_id: str, reward: dict) -> Redemption:
    row = Redemption(
        session_id=session_id,
        reward_id=reward["id"],
        reward_name=reward["name"],
        cost=reward["cost"],
        code=generate_code(reward["id"]),
    )
    db_session.add(row)
    # Surfaces a code collision as IntegrityError inside the unit of work.
    db_session.flush()
    return row


def redeem(db_session, catalog: dict, session_id: str, reward_id: str) -> dict:
    reward = _lookup(catalog, reward_id)

    def _redeem():
        gs = get_session(db_session, session_id, for_update=True)
        if gs.coins < reward["cost"]:
            raise NotEnoughCoins()
        gs.coins = gs.coins - reward["cost"]
        row = _append(db_session, session_id, reward)
        return {
            "code": row.code,
            "rewardName": row.reward_name,
            "cost": row.cost,
            "remainingCoins": gs.coins,
        }

    result = run_atomic(db_session, _redeem, retry_on=(IntegrityError,))
    current_app.logger.info("Redeemed %s for session=%s cost=%s", reward_id, session_id, reward["cost"])
    return result


def mint_codes(db_session, catalog: dict, reward_id: str, count: int = 1) -> list[str]:
    """Admin-issued codes: recorded against the ADMIN sentinel, no coin debit."""
    reward = _lookup(catalog, reward_id)
    count = max(1, min(int(count), ADMIN_MINT_MAX))

    def _mint():
        return [_append(db_session, ADMIN_SESSION_ID, reward).code for _ in range(count)]

    codes = run_atomic(db_session, _mint, retry_on=(IntegrityError,))
    current_app.logger.info("Admin minted %s code(s) for %s", len(codes), reward_id)
    return codes


def list_redemptions(db_session, limit: int = 100) -> list[dict]:
    rows = db_session.execute(
        select(Redemption).order_by(Redemption.created_at.desc(), Redemption.id.desc()).limit(limit)
    ).scalars().all()
    return [r.to_dict() for r in rows]


@redemptions_api.get("/api/rewards")
def api_rewards():
    catalog = current_app.config["REWARDS_CATALOG"]
    return jsonify({"success": True, "rewards": list(catalog.values())})


@redemptions_api.post("/api/redeem")
@limiter.limit("10 per minute")
def api_redeem():
    data = request.get_json(silent=True) or {}
    session_id = request_field(data, "sessionId", "session_id")
    reward_id = request_field(data, "rewardId", "reward_id")
    if not session_id or not reward_id:
        raise MissingFields()

    result = redeem(db.session, current_app.config["REWARDS_CATALOG"], session_id, reward_id)
    return jsonify({"success": True, **result})
