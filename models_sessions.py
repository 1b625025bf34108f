"""Per-player game state (coins, daily ad counter, streak).

`sessions` here is the player's persistent game record, not an HTTP/auth session.
"""

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, Column, Date, DateTime, Index, Integer, String

from extensions import db


class GameSession(db.Model):
    __tablename__ = "sessions"

    session_id = Column(String(36), primary_key=True)
    username = Column(String(40), nullable=False)
    coins = Column(Integer, nullable=False, default=0)

    # Ad rewards granted on `daily_date` (UTC); stale dates count as 0.
    daily_count = Column(Integer, nullable=False, default=0)
    daily_date = Column(Date, nullable=True)
    last_ad_time = Column(BigInteger, nullable=False, default=0)  # ms epoch

    streak_count = Column(Integer, nullable=False, default=0)
    last_claim_date = Column(Date, nullable=True)  # UTC

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("coins >= 0", name="ck_sessions_coins_non_negative"),
        CheckConstraint("daily_count >= 0", name="ck_sessions_daily_count_non_negative"),
        Index("idx_sessions_coins", "coins"),
    )

    def to_dict(self):
        return {
            "sessionId": self.session_id,
            "username": self.username,
            "coins": self.coins,
            "dailyCount": self.daily_count,
            "dailyDate": self.daily_date.isoformat() if self.daily_date else None,
            "lastAdTime": self.last_ad_time,
            "streakCount": self.streak_count,
            "lastClaimDate": self.last_claim_date.isoformat() if self.last_claim_date else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
