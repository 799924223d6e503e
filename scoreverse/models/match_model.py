from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

class PointsAward(BaseModel):
    player_id: str
    points: int # may be negative for handicap adjustments

class HandicapSuggestion(BaseModel):
    player_name: str
    handicap: Optional[float] = None # absent when the player needs no handicap
    reason: Optional[str] = None

class MatchModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    game_id: str
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    player_ids: List[str] = Field(default_factory=list)
    winner_ids: List[str] = Field(default_factory=list)
    points_awarded: List[PointsAward] = Field(default_factory=list)
    handicap_suggestions: Optional[List[HandicapSuggestion]] = None
    space_id: Optional[str] = None # None means the global context
    owner_id: str

    class Config:
        from_attributes = True

    @field_validator('date')
    @classmethod
    def date_is_utc_aware(cls, v: datetime) -> datetime:
        # Naive timestamps are taken as UTC so match dates always compare
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
