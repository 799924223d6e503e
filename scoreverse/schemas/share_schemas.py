from typing import List, Literal

from pydantic import BaseModel, Field

from scoreverse.models import GameModel, MatchModel, PlayerModel, SpaceModel, TournamentModel

class ShareLink(BaseModel):
    share_id: str

class ShareOwner(BaseModel):
    username: str

class PublicShareData(BaseModel):
    owner: ShareOwner
    type: Literal["live"] = "live"
    players: List[PlayerModel] = Field(default_factory=list)
    games: List[GameModel] = Field(default_factory=list)
    matches: List[MatchModel] = Field(default_factory=list)
    spaces: List[SpaceModel] = Field(default_factory=list)
    tournaments: List[TournamentModel] = Field(default_factory=list)

class SharedSpaceData(BaseModel):
    space: SpaceModel
    players: List[PlayerModel] = Field(default_factory=list)
    games: List[GameModel] = Field(default_factory=list)
    matches: List[MatchModel] = Field(default_factory=list)
    tournaments: List[TournamentModel] = Field(default_factory=list)
