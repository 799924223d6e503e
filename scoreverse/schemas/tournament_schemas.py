from pydantic import BaseModel, Field
from typing import List, Optional

from scoreverse.models.stats_model import ScoreData
from scoreverse.models.tournament_model import TournamentModel

class TournamentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    game_id: str
    target_points: int = Field(gt=0)

class TournamentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    target_points: Optional[int] = Field(default=None, gt=0)

class TournamentStandings(BaseModel):
    tournament: TournamentModel
    leaderboard: List[ScoreData] = Field(default_factory=list)
