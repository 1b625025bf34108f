"""Admin reward-code APIs.

Admin access rules:
- POST /api/admin/login exchanges the admin key for a short-lived credential.
- Only the sha256 of the credential is persisted (admin_tokens), with an expiry,
  so credentials survive restarts and work across workers.
- Admin routes take the credential from the X-Admin-Token header, or the
  adminToken body/query field.

Routes:
- POST /api/admin/login
- GET  /api/admin/issued
- POST /api/admin/create-code
"""

from __future__ import annotations

import functools
import hashlib
import hmac
import os
import secrets
from datetime import datetime, timedelta

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import delete

from errors import AdminAuthRequired, InvalidPassword, InvalidRequest, MissingFields
from extensions import db, limiter
from models_admin import AdminToken
from redemptions import list_redemptions, mint_codes
from sessions import request_field


def _admin_key() -> str:
    """Dashboard key; falls back to ADMIN_API_KEY when ADMIN_REWARDS_KEY is not set.

    The development default is refused in production (Render or FLASK_ENV=production).
    """
    key = os.getenv("ADMIN_REWARDS_KEY") or os.getenv("ADMIN_API_KEY")
    if key:
        return key
    if os.getenv("RENDER") or os.getenv("FLASK_ENV") == "production":
        raise RuntimeError("ADMIN_REWARDS_KEY missing in production; refusing the default admin key.")
    return "admin123"


ADMIN_TOKEN_TTL = timedelta(minutes=int(os.getenv("ADMIN_TOKEN_TTL_MINUTES", "60")))


def _hash(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AdminAuthService:
    def __init__(self, password: str, ttl: timedelta = ADMIN_TOKEN_TTL):
        self.password = password
        self.ttl = ttl

    def login(self, db_session, password: str, now: datetime | None = None) -> tuple[str, datetime]:
        if not password:
            raise MissingFields("Missing password")
        if not hmac.compare_digest(str(password).encode("utf-8"), str(self.password).encode("utf-8")):
            current_app.logger.warning("Admin login failed")
            raise InvalidPassword()

        now = now or datetime.utcnow()
        token = secrets.token_urlsafe(32)
        expires_at = now + self.ttl
        db_session.add(AdminToken(token_hash=_hash(token), created_at=now, expires_at=expires_at))
        db_session.commit()
        current_app.logger.info("Admin credential issued, expires %s", expires_at.isoformat())
        return token, expires_at

    def verify(self, db_session, token: str, now: datetime | None = None) -> bool:
        if not token:
            return False
        row = db_session.get(AdminToken, _hash(token))
        return row is not None and row.expires_at > (now or datetime.utcnow())

    def purge_expired(self, db_session, now: datetime | None = None) -> int:
        res = db_session.execute(delete(AdminToken).where(AdminToken.expires_at <= (now or datetime.utcnow())))
        db_session.commit()
        return res.rowcount


def _auth() -> AdminAuthService:
    return current_app.extensions["admin_auth"]


def _presented_token() -> str:
    data = request.get_json(silent=True) or {}
    return (
        request.headers.get("X-Admin-Token")
        or request_field(data, "adminToken", "admin_token")
        or request_field(request.args, "adminToken", "admin_token")
    )


def require_admin(view):
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        if not _auth().verify(db.session, _presented_token()):
            raise AdminAuthRequired()
        return view(*args, **kwargs)

    return wrapper


admin_rewards = Blueprint("admin_rewards", __name__)


@admin_rewards.post("/api/admin/login")
@limiter.limit("5 per minute")
def api_admin_login():
    data = request.get_json(silent=True) or {}
    token, expires_at = _auth().login(db.session, data.get("password") or "")
    return jsonify({"success": True, "adminToken": token, "expiresAt": expires_at.isoformat()})


@admin_rewards.get("/api/admin/issued")
@require_admin
def api_admin_issued():
    return jsonify({"success": True, "rows": list_redemptions(db.session, limit=100)})


@admin_rewards.post("/api/admin/create-code")
@require_admin
def api_admin_create_code():
    data = request.get_json(silent=True) or {}
    reward_id = request_field(data, "rewardId", "reward_id")
    if not reward_id:
        raise MissingFields("Missing rewardId")

    raw_count = data.get("count")
    if raw_count is None:
        raw_count = 1
    try:
        count = int(raw_count)
    except (TypeError, ValueError):
        raise InvalidRequest("Invalid count")
    if count < 1:
        raise InvalidRequest("Invalid count")

    codes = mint_codes(db.session, current_app.config["REWARDS_CATALOG"], reward_id, count)
    return jsonify({"success": True, "created": codes})
