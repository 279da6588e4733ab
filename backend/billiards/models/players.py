from sqlalchemy import Column, DateTime, Integer, String

from billiards.core.timeframes import utcnow
from billiards.db.base import Base

PLAYER_NAME_MAX = 100


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)

    # Display name, case-sensitive and unique
    name = Column(String(PLAYER_NAME_MAX), nullable=False, unique=True, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Player(id={self.id}, name={self.name!r})>"
