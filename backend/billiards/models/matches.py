import uuid

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from billiards.core.timeframes import utcnow
from billiards.db.base import Base

RESULT_WIN = "win"
RESULT_DRAW = "draw"


def match_result_for(winner_count: int) -> str:
    return RESULT_DRAW if winner_count > 1 else RESULT_WIN


class Match(Base):
    __tablename__ = "matches"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Ordered list of player ids. No FK possible on an array, so player
    # deletion removes these rows in services.players.delete_player.
    winner_ids = Column(JSON, nullable=False)

    loser_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)
    payer_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)

    cost = Column(Numeric(10, 2), nullable=False)

    # "win" (one winner) or "draw" (several)
    match_result = Column(String(8), nullable=False, default=RESULT_WIN)

    # Free-form display names, first one is the daily champion's winner
    participants = Column(JSON, nullable=True)

    date = Column(DateTime, nullable=False, default=utcnow, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    loser = relationship("Player", foreign_keys=[loser_id], lazy="joined")
    payer = relationship("Player", foreign_keys=[payer_id], lazy="joined")
    stats = relationship("MatchStat", back_populates="match", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("cost >= 0", name="ck_matches_cost_non_negative"),
        Index("ix_matches_payer_date", "payer_id", "date"),
    )

    def __repr__(self):
        return f"<Match(id={self.id}, winners={self.winner_ids}, loser={self.loser_id}, payer={self.payer_id})>"
