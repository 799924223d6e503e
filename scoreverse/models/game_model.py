from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

class GameModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1, max_length=100)
    icon: Optional[str] = None
    description: Optional[str] = None
    points_per_win: int = 1
    min_players: int = Field(default=2, ge=1)
    max_players: Optional[int] = None
    owner_id: str

    class Config:
        from_attributes = True

    @model_validator(mode="after")
    def max_players_not_below_min(self):
        if self.max_players is not None and self.max_players < self.min_players:
            raise ValueError('max_players must be greater than or equal to min_players')
        return self
