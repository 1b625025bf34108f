from sqlalchemy import BigInteger, Column, ForeignKey, Index, String

from extensions import db


class AdToken(db.Model):
    """Single-use authorization for one ad reward; deleted when settled."""

    __tablename__ = "ad_tokens"

    token = Column(String(64), primary_key=True)
    session_id = Column(String(36), ForeignKey("sessions.session_id"), nullable=False, index=True)
    created_at = Column(BigInteger, nullable=False)  # ms epoch

    __table_args__ = (
        Index("idx_ad_tokens_created", "created_at"),
    )

    def to_dict(self):
        return {"token": self.token, "createdAt": self.created_at}
