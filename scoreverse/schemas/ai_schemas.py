from pydantic import BaseModel, Field
from typing import List, Optional

from scoreverse.models.match_model import HandicapSuggestion

class PlayerHandicapInput(BaseModel):
    player_name: str
    win_rate: float = Field(ge=0, le=1)
    average_score: float

class SuggestHandicapInput(BaseModel):
    game_name: str
    player_stats: List[PlayerHandicapInput] = Field(min_length=1)

class SuggestHandicapOutput(BaseModel):
    suggestions: List[HandicapSuggestion] = Field(default_factory=list)

class SuggestMatchupsInput(BaseModel):
    game_name: str
    player_names: List[str] = Field(min_length=2)
    language: Optional[str] = None

class Pairing(BaseModel):
    player1: str
    player2: str

class SuggestMatchupsOutput(BaseModel):
    pairings: List[Pairing] = Field(default_factory=list)
    bye: Optional[str] = None
    commentary: Optional[str] = None
