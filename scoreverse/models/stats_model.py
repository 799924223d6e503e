"""Derived, never persisted. Recomputed from match records on every read."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from .game_model import GameModel
from .player_model import PlayerModel
from .tournament_model import TournamentModel

UNKNOWN_PLAYER_NAME = "Unknown Player"

class ScoreData(BaseModel):
    player_id: str
    player_name: str
    avatar_url: Optional[str] = None
    total_points: int = 0
    games_played: int = 0
    wins: int = 0

class StreakType(str, Enum):
    WIN = "W"
    LOSS = "L"

class CurrentStreak(BaseModel):
    type: StreakType = StreakType.WIN
    count: int = 0

    class Config:
        use_enum_values = True

class PlayerGameStats(BaseModel):
    game: GameModel
    wins: int = 0
    losses: int = 0
    games_played: int = 0
    win_rate: float = 0.0 # ratio in [0, 1]

class PlayerStats(BaseModel):
    player: PlayerModel
    total_games: int = 0
    total_wins: int = 0
    total_losses: int = 0
    win_rate: float = 0.0
    current_streak: CurrentStreak = CurrentStreak()
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    total_points: int = 0
    average_points_per_match: float = 0.0
    game_stats: List[PlayerGameStats] = []

class TrophyShelf(BaseModel):
    player: PlayerModel
    trophies: List[TournamentModel] = []
