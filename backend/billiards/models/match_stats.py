from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from billiards.core.timeframes import utcnow
from billiards.db.base import Base


class MatchStat(Base):
    __tablename__ = "match_stats"

    id = Column(Integer, primary_key=True, index=True)

    match_id = Column(String(36), ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)

    # 0/1 each; a participant who neither won nor lost has 0/0
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    match = relationship("Match", back_populates="stats")

    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_match_stats_match_player"),
    )
