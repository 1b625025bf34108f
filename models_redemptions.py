"""Redemption ledger.

Append-only audit of issued reward codes. Reward name and cost are snapshots of
the catalog entry at redemption time, since the catalog file can change later.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String

from extensions import db

# session_id recorded for codes minted from the admin API
ADMIN_SESSION_ID = "ADMIN"


class Redemption(db.Model):
    __tablename__ = "redemptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(36), nullable=False, index=True)
    reward_id = Column(String(64), nullable=False)
    reward_name = Column(String(120), nullable=False)
    cost = Column(Integer, nullable=False, default=0)
    code = Column(String(80), nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_redemptions_created", "created_at"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "rewardId": self.reward_id,
            "rewardName": self.reward_name,
            "cost": self.cost,
            "code": self.code,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
