from datetime import datetime

from sqlalchemy import Column, DateTime, String

from extensions import db


class AdminToken(db.Model):
    """Issued admin credential. Only the sha256 of the credential is stored."""

    __tablename__ = "admin_tokens"

    token_hash = Column(String(64), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)
