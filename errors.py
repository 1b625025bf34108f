"""Error taxonomy for the rewards API.

Every expected rejection is a `RewardError` subclass with a stable `code` the
client maps to a message, and the HTTP status it is rendered with. Services
raise them before anything is committed, so a rejection never leaves a partial
mutation behind.
"""

from __future__ import annotations

from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from extensions import db


class RewardError(Exception):
    code = "INTERNAL_ERROR"
    status = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> dict:
        return {"success": False, "code": self.code, "error": self.message}


class MissingFields(RewardError):
    code = "MISSING_FIELDS"
    status = 400
    message = "Missing fields"


class InvalidRequest(RewardError):
    code = "INVALID_REQUEST"
    status = 400
    message = "Invalid request"


class SessionNotFound(RewardError):
    code = "SESSION_NOT_FOUND"
    status = 404
    message = "Session not found"


class InvalidToken(RewardError):
    code = "INVALID_TOKEN"
    status = 400
    message = "Invalid token"


class AdNotPlayedLongEnough(RewardError):
    code = "AD_NOT_PLAYED_LONG_ENOUGH"
    status = 400
    message = "Ad not played long enough"


class Cooldown(RewardError):
    code = "COOLDOWN"
    status = 429

    def __init__(self, wait_seconds: int):
        self.wait_seconds = int(wait_seconds)
        super().__init__(f"Cooldown. Wait {self.wait_seconds}s")

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["waitSeconds"] = self.wait_seconds
        return out


class DailyLimit(RewardError):
    code = "DAILY_LIMIT"
    status = 403
    message = "Daily limit reached"


class AlreadyClaimed(RewardError):
    code = "ALREADY_CLAIMED"
    status = 409
    message = "Already claimed today"


class InvalidReward(RewardError):
    code = "INVALID_REWARD"
    status = 400
    message = "Invalid reward"


class NotEnoughCoins(RewardError):
    code = "NOT_ENOUGH_COINS"
    status = 400
    message = "Not enough coins"


class InvalidPassword(RewardError):
    code = "INVALID_PASSWORD"
    status = 403
    message = "Invalid password"


class AdminAuthRequired(RewardError):
    code = "ADMIN_AUTH_REQUIRED"
    status = 403
    message = "Admin auth required"


class TransactionConflict(RewardError):
    """Raised when optimistic retries run out."""


def register_error_handlers(app):
    """Always answer JSON (never HTML) so the frontend can safely parse errors."""

    @app.errorhandler(RewardError)
    def _reward_error(exc: RewardError):
        return jsonify(exc.to_dict()), exc.status

    @app.errorhandler(429)
    def _rate_limited(exc):
        return jsonify({"success": False, "code": "RATE_LIMITED", "error": f"Rate limit exceeded: {exc.description}"}), 429

    @app.errorhandler(SQLAlchemyError)
    def _storage_error(exc):
        db.session.rollback()
        current_app.logger.exception("Storage failure")
        return jsonify(RewardError().to_dict()), 500
