from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer

from billiards.core.timeframes import utcnow
from billiards.db.base import Base

ROTATION_ROW_ID = 1


class PayerRotation(Base):
    __tablename__ = "payer_rotation"

    # Singleton: the whole system has one row, id = 1
    id = Column(Integer, primary_key=True, default=ROTATION_ROW_ID)

    current_payer_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False)

    # bumped on every write
    version = Column(Integer, nullable=False, default=1)

    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(f"id = {ROTATION_ROW_ID}", name="ck_payer_rotation_singleton"),
    )
