from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

class TournamentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"

class TournamentModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1, max_length=100)
    game_id: str
    target_points: int = Field(gt=0)
    status: TournamentStatus = TournamentStatus.ACTIVE
    winner_player_id: Optional[str] = None
    date_completed: Optional[datetime] = None
    space_id: Optional[str] = None
    owner_id: str

    class Config:
        from_attributes = True
        use_enum_values = True

    @model_validator(mode="after")
    def completed_has_winner(self):
        if self.status == TournamentStatus.COMPLETED and not self.winner_player_id:
            raise ValueError('A completed tournament must have a winner')
        return self

    @property
    def is_active(self) -> bool:
        return self.status == TournamentStatus.ACTIVE
