from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlayerStatsOut(_CamelModel):
    id: int
    name: str
    wins: int = 0
    losses: int = 0
    total_spent: float = 0.0
    matches_played: int = 0
    win_rate: float = 0.0


class DailyChampionRow(_CamelModel):
    name: str
    player_id: Optional[int] = None
    wins: int = 0
    losses: int = 0
    matches_played: int = 0
    win_rate: float = 0.0


class ExpensesOut(_CamelModel):
    total: float
    by_player: dict[str, float]
