from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from billiards.models.players import PLAYER_NAME_MAX


class PlayerCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=PLAYER_NAME_MAX)


class PlayerUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=PLAYER_NAME_MAX)


class PlayerOut(BaseModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PayerOut(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)
