from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BadgeOut(BaseModel):
    id: str
    name: str
    criterion: str
    short_description: str
    icon: str

    model_config = ConfigDict(from_attributes=True)


class PlayerBadgeOut(BaseModel):
    id: int
    player_id: int
    badge_id: str
    match_id: Optional[str] = None
    awarded_at: datetime
    name: str
    criterion: str
    short_description: str
    icon: str


class PlayerBadgeSummary(BaseModel):
    id: int
    player_id: int
    badge_id: str
    match_id: Optional[str] = None
    awarded_at: datetime
    player_name: str
    badge_name: str
    icon: str
    short_description: str


class AwardBadgeRequest(BaseModel):
    player_id: int = Field(ge=1)
    badge_id: str = Field(min_length=1, max_length=50)
    match_id: Optional[str] = None


class TurtleMiracleRequest(BaseModel):
    player_id: int = Field(ge=1)
    match_id: Optional[str] = None
