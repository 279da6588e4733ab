from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from billiards.core.timeframes import utcnow
from billiards.db.base import Base


class Badge(Base):
    __tablename__ = "badges"

    id = Column(String(50), primary_key=True)  # slug, e.g. "annihilator"
    name = Column(String(100), nullable=False)
    criterion = Column(Text, nullable=False)
    short_description = Column(Text, nullable=False)
    icon = Column(String(10), nullable=False)

    created_at = Column(DateTime, nullable=False, default=utcnow)


class PlayerBadge(Base):
    __tablename__ = "player_badges"

    id = Column(Integer, primary_key=True, index=True)
    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)
    badge_id = Column(String(50), ForeignKey("badges.id", ondelete="CASCADE"), nullable=False, index=True)
    match_id = Column(String(36), ForeignKey("matches.id", ondelete="SET NULL"), nullable=True)

    awarded_at = Column(DateTime, nullable=False, default=utcnow)

    player = relationship("Player", lazy="joined")
    badge = relationship("Badge", lazy="joined")

    # NULL match_id rows never collide here, and SET NULL can leave several
    # unmatched awards for one badge; award_badge checks for an existing row first.
    # A partial unique index would make deleting such a match fail instead.
    __table_args__ = (
        UniqueConstraint("player_id", "badge_id", "match_id", name="uq_player_badge_match"),
    )
