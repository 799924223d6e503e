from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from scoreverse.models.match_model import MatchModel, PointsAward, HandicapSuggestion
from scoreverse.models.tournament_model import TournamentModel

class MatchCreate(BaseModel):
    game_id: str
    player_ids: List[str] = Field(min_length=1)
    winner_ids: List[str] = Field(default_factory=list)
    # When omitted every winner gets the game's points_per_win
    points_awarded: Optional[List[PointsAward]] = None
    handicap_suggestions: Optional[List[HandicapSuggestion]] = None
    apply_handicaps: bool = False
    date: Optional[datetime] = None

class MatchUpdate(BaseModel):
    """Corrections allowed after a match is recorded."""
    winner_ids: Optional[List[str]] = None
    points_awarded: Optional[List[PointsAward]] = None

class MatchRecorded(BaseModel):
    match: MatchModel
    completed_tournaments: List[TournamentModel] = Field(default_factory=list)
