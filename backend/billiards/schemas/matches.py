from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MatchDetail(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    wins: int = Field(default=0, ge=0, le=1)
    losses: int = Field(default=0, ge=0, le=1)


class MatchCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    winners: list[str] = Field(default_factory=list)
    # older clients send a single winner
    winner: Optional[str] = None
    loser: str = Field(min_length=1)
    cost: Decimal = Field(ge=0)
    participants: Optional[list[str]] = None
    details: Optional[list[MatchDetail]] = None

    @model_validator(mode="after")
    def _fold_winner(self):
        if any(not w for w in self.winners):
            raise ValueError("winner names must not be blank")
        names = list(self.winners)
        if self.winner:
            names.insert(0, self.winner)
        if not names:
            raise ValueError("at least one winner is required")
        self.winners = names
        self.winner = None
        return self


class MatchOut(BaseModel):
    id: str
    winners: list[str]
    loser: str
    payer: str
    cost: float
    date: datetime
    participants: list[str] = []
    match_result: str
